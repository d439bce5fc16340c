from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Dict
from enum import Enum

class RelationType(str, Enum):
    BLOOD = "blood"
    ADOPTED = "adopted"

class SpouseType(str, Enum):
    MARRIED = "married"
    DIVORCED = "divorced"

class NodeGender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNSPECIFIED = "unspecified"

class ChildRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    type: RelationType

class Relation(BaseModel):
    id: str
    type: RelationType

class SpouseRelation(BaseModel):
    id: str
    type: SpouseType

class Node(BaseModel):
    id: str
    gender: NodeGender = NodeGender.UNSPECIFIED
    parents: List[Relation] = []
    children: List[Relation] = []
    siblings: List[Relation] = []
    spouses: List[SpouseRelation] = []

class RootResolution(BaseModel):
    rootId: Optional[str] = None
    diagnostics: List[str] = []

class PositionedNode(BaseModel):
    id: str
    left: int
    top: int

class Spacing(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int
    y: int
    nodeWidth: int
    nodeHeight: int

class Point(BaseModel):
    x: float
    y: float

class Segment(BaseModel):
    start: Point
    end: Point

class PixelNode(BaseModel):
    id: str
    left: int
    top: int
    x: float
    y: float
    boxLeft: float
    boxTop: float
    width: int
    height: int

class SpouseConnector(BaseModel):
    pairKey: str
    memberIds: List[str]
    line: Segment
    midpoint: Point

class FamilyConnector(BaseModel):
    parentId: str
    childIds: List[str]
    trunk: Segment
    bar: Segment
    drops: List[Segment]

class TreeGeometry(BaseModel):
    nodes: List[PixelNode] = []
    spouseConnectors: List[SpouseConnector] = []
    familyConnectors: List[FamilyConnector] = []

class TreeGraphOut(BaseModel):
    rootId: Optional[str] = None
    diagnostics: List[str] = []
    nodes: List[Node]
    childMap: Dict[str, List[ChildRef]]

class TreeLayoutOut(BaseModel):
    rootId: Optional[str] = None
    diagnostics: List[str] = []
    generation: Optional[int] = None
    preset: str
    positioned: List[PositionedNode]
    geometry: TreeGeometry
