from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from familytree.models.member_model import Gender

class RootMemberIn(BaseModel):
    fullName: str = Field(min_length=1)
    gender: Gender
    birthDate: Optional[date] = None
    address: Optional[str] = None

class FamilyTreeCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    origin: Optional[str] = None
    establishYear: Optional[int] = None
    root: RootMemberIn

class FamilyTreeUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    origin: Optional[str] = None
    establishYear: Optional[int] = None

class FamilyTreeOut(BaseModel):
    treeId: str = Field(..., alias="_id")
    name: str
    description: Optional[str] = None
    origin: Optional[str] = None
    establishYear: Optional[int] = None
    rootMemberId: Optional[int] = None
    createdAt: datetime

class TreeTrends(BaseModel):
    memberGrowth: int = 0
    deaths: int = 0
    marriages: int = 0
    divorces: int = 0
    achievements: int = 0

class TreeStatistics(BaseModel):
    totalMembers: int
    livingMembers: int
    totalGenerations: int
    windowDays: int
    trends: TreeTrends
