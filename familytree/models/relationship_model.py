from pydantic import BaseModel
from typing import Optional
from datetime import date
from familytree.models.member_model import MemberRef

class SpouseRelationshipCreate(BaseModel):
    member1Id: int
    member2Id: int
    marriageDate: date

class DivorceCreate(BaseModel):
    relationshipId: int
    divorceDate: date

class SpouseRelationshipOut(BaseModel):
    id: int
    familyMember1Id: int
    familyMember2Id: int
    marriageDate: Optional[date] = None
    divorceDate: Optional[date] = None

class MarriageEventOut(BaseModel):
    id: int
    marriageDate: Optional[date] = None
    divorceDate: Optional[date] = None
    familyMember1: MemberRef
    familyMember2: MemberRef
