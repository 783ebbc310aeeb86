"""
Scenario schema definitions.

A scenario is an authored branching narrative: an ordered list of scenes,
each offering branches that lead to other scenes and optionally carry an
echo (narrative flavour event) and a compass change (moral axis delta).
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from mystira.utils.clock import utc_now

# Sentinel next-scene id that ends the story
END_SCENE_ID = "END"


class SceneType(str, Enum):
    """Kinds of scenes; only choice scenes may carry echo logs"""

    NARRATIVE = "narrative"
    CHOICE = "choice"
    ROLL = "roll"
    SPECIAL = "special"


class EchoLog(BaseModel):
    """A narrative flavour event recorded when a branch is taken"""

    echo_type: str = Field(..., description="Echo type from the master echo list")
    description: str = Field(default="", description="What happened")
    strength: float = Field(default=0.5, description="Between 0.1 and 1.0")
    timestamp: Optional[datetime] = Field(
        default=None, description="Set when the echo is materialized in a session"
    )


class CompassChange(BaseModel):
    """Delta applied to one compass axis"""

    axis: str = Field(..., description="Compass axis name")
    delta: float = Field(..., description="Between -1.0 and 1.0")
    developmental_link: Optional[str] = Field(default=None)


class MediaReferences(BaseModel):
    """Media attached to a scene"""

    image: Optional[str] = None
    audio: Optional[str] = None
    video: Optional[str] = None


class Branch(BaseModel):
    """One outgoing choice edge from a scene"""

    choice: str = Field(..., description="Label the player selects")
    next_scene_id: str = Field(
        default="", description="Target scene id; '' or 'END' end the story"
    )
    echo_log: Optional[EchoLog] = None
    compass_change: Optional[CompassChange] = None


class Scene(BaseModel):
    """A single scene of a scenario"""

    id: str = Field(default="")
    title: str = Field(default="")
    type: SceneType = Field(default=SceneType.NARRATIVE)
    description: str = Field(default="")
    next_scene_id: Optional[str] = Field(
        default=None, description="Continuation for linear scenes without branches"
    )
    media: Optional[MediaReferences] = None
    branches: List[Branch] = Field(default_factory=list)
    difficulty: int = Field(default=0)

    def find_branch(self, choice: str) -> Optional[Branch]:
        """Return the branch whose label matches exactly, if any"""
        for branch in self.branches:
            if branch.choice == choice:
                return branch
        return None

    @property
    def is_terminal(self) -> bool:
        """True when nothing can follow this scene"""
        return not self.branches and not self.next_scene_id


class Scenario(BaseModel):
    """An authored branching-narrative definition"""

    id: str = Field(default="")
    title: str = Field(default="")
    description: str = Field(default="")
    tags: List[str] = Field(default_factory=list)
    age_group: str = Field(default="", description="Target age group name")
    minimum_age: int = Field(default=0, description="Minimum player age")
    core_axes: List[str] = Field(
        default_factory=list, description="Compass axes tracked by sessions"
    )
    scenes: List[Scene] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)

    def find_scene(self, scene_id: Optional[str]) -> Optional[Scene]:
        """Linear lookup of a scene by id"""
        if not scene_id:
            return None
        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        return None


class ScenarioCreateRequest(BaseModel):
    """Request to create or replace a scenario"""

    title: str
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    age_group: str = ""
    minimum_age: int = 0
    core_axes: List[str] = Field(default_factory=list)
    scenes: List[Scene] = Field(default_factory=list)


class ScenarioSummary(BaseModel):
    """Listing entry for a scenario"""

    id: str
    title: str
    age_group: str
    minimum_age: int
    scene_count: int
    created_at: Optional[datetime] = None
