from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union
from datetime import date
from enum import Enum

Gender = Literal["MALE", "FEMALE", "OTHER"]

class RelationshipKind(str, Enum):
    NONE = "none"
    PARENT = "parent"
    SPOUSE = "spouse"

class MemberRef(BaseModel):
    id: int
    fullName: Optional[str] = None

class SpouseAsMember1(BaseModel):
    """Relationship seen from its member1 side; the partner is ``familyMember2``."""
    id: Optional[int] = None
    marriageDate: Optional[date] = None
    divorceDate: Optional[date] = None
    familyMember2: MemberRef

class SpouseAsMember2(BaseModel):
    """Relationship seen from its member2 side; the partner is ``familyMember1``."""
    id: Optional[int] = None
    marriageDate: Optional[date] = None
    divorceDate: Optional[date] = None
    familyMember1: MemberRef

class MemberRecord(BaseModel):
    """One member as read from storage, with both spouse directions attached."""
    id: int
    fullName: str
    gender: Optional[Gender] = None
    birthday: Optional[date] = None
    address: Optional[str] = None
    generation: Optional[Union[str, int]] = None
    isRootPerson: bool = False
    isAdopted: bool = False
    relationshipEstablishedDate: Optional[date] = None
    parentId: Optional[int] = None
    parent: Optional[MemberRef] = None
    children: List[MemberRef] = []
    spouse1: List[SpouseAsMember1] = []
    spouse2: List[SpouseAsMember2] = []
    passingRecords: List[dict] = []
    achievements: List[dict] = []

class DateRangeIn(BaseModel):
    label: str = Field(min_length=1, description="Job title or location")
    startDate: Optional[date] = None
    endDate: Optional[date] = None

class MemberCreate(BaseModel):
    fullName: str = Field(min_length=1)
    gender: Gender
    birthDate: date
    address: str = Field(min_length=1)
    relatedMemberId: Optional[int] = None
    relationship: RelationshipKind = RelationshipKind.NONE
    relationshipDate: Optional[date] = None
    isAdopted: bool = False
    placesOfOrigin: List[DateRangeIn] = []
    occupations: List[DateRangeIn] = []

class MemberUpdate(BaseModel):
    fullName: Optional[str] = Field(default=None, min_length=1)
    gender: Optional[Gender] = None
    birthday: Optional[date] = None
    address: Optional[str] = None
    generation: Optional[str] = None
    isAdopted: Optional[bool] = None
    parentId: Optional[int] = None
    spouseId: Optional[int] = None
    relationshipDate: Optional[date] = None

class RelationshipCheckIn(BaseModel):
    birthDate: Optional[date] = None
    relationship: RelationshipKind
    relationshipDate: Optional[date] = None

class ValidationResult(BaseModel):
    ok: bool
    message: Optional[str] = None
    field: Optional[str] = None

class ParentRef(MemberRef):
    birthday: Optional[date] = None

class BirthRecordOut(BaseModel):
    """A child's registration under its parent."""
    id: int
    fullName: str
    parentId: int
    relationshipEstablishedDate: Optional[date] = None
    parent: ParentRef

class BirthRecordUpdate(BaseModel):
    birthDate: date
