from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Any
from datetime import date, datetime

class BurialPlaceIn(BaseModel):
    location: str = Field(min_length=1)
    startDate: Optional[date] = None
    endDate: Optional[date] = None

class PassingRecordCreate(BaseModel):
    familyMemberId: int
    dateOfPassing: date
    causesOfDeath: List[str] = Field(min_length=1)
    burialPlaces: List[BurialPlaceIn] = []

class PassingRecordUpdate(BaseModel):
    dateOfPassing: date
    causesOfDeath: List[str] = Field(min_length=1)
    burialPlaces: List[BurialPlaceIn] = Field(min_length=1)

class PassingRecordOut(BaseModel):
    passingRecordId: str = Field(..., alias="_id")
    treeId: str
    familyMemberId: int
    dateOfPassing: date
    causesOfDeath: List[str]
    burialPlaces: List[BurialPlaceIn] = []
    createdAt: datetime

class AchievementCreate(BaseModel):
    familyMemberId: int
    title: str = Field(min_length=1)
    achievementType: str = Field(min_length=1)
    achieveDate: Optional[date] = None
    description: Optional[str] = None

class AchievementUpdate(BaseModel):
    title: str = Field(min_length=1)
    achievementType: str = Field(min_length=1)
    achieveDate: date
    description: Optional[str] = None

class AchievementOut(BaseModel):
    achievementId: str = Field(..., alias="_id")
    treeId: str
    familyMemberId: int
    title: str
    achievementType: str
    achieveDate: Optional[date] = None
    description: Optional[str] = None
    createdAt: datetime

class PassingSummary(BaseModel):
    passingRecordId: str = Field(..., alias="_id")
    dateOfPassing: date

class PassingCheckOut(BaseModel):
    hasRecord: bool
    passingRecord: Optional[PassingSummary] = None

ChangeAction = Literal["CREATE", "UPDATE", "DELETE"]

class ChangeLogOut(BaseModel):
    changeLogId: str = Field(..., alias="_id")
    treeId: str
    entityType: str
    entityId: Any
    action: ChangeAction
    oldValues: Optional[dict] = None
    newValues: Optional[dict] = None
    createdAt: datetime
