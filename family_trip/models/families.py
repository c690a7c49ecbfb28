"""
Family roster - who is on the trip.
Used for the guest list and for per-family flights, lodging and transfers.
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Iterable, Optional


# Reserved pseudo-family id: entries under it apply to every family
ALL_FAMILIES_ID = "all"


class FamilyMember(BaseModel):
    """A single traveler."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., description="Display name")
    note: Optional[str] = Field(None, description="Short note, e.g. 'oldest'")


class Family(BaseModel):
    """A family group travelling together."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Stable family id, e.g. 'paul-karen'")
    name: str = Field(..., description="Display name, e.g. 'Paul and Karen'")
    members: list[FamilyMember] = Field(default_factory=list)


FAMILIES: list[Family] = [
    Family(
        id="paul-karen",
        name="Paul and Karen",
        members=[
            FamilyMember(name="Paul", note="Grandpa"),
            FamilyMember(name="Karen", note="Grandma · Birthday girl"),
        ],
    ),
    Family(
        id="lance-allison",
        name="Lance and Allison",
        members=[
            FamilyMember(name="Lance"),
            FamilyMember(name="Allison"),
            FamilyMember(name="Cohen", note="oldest"),
            FamilyMember(name="Keane", note="boy"),
            FamilyMember(name="Wyatt", note="boy"),
            FamilyMember(name="Caroline", note="daughter"),
        ],
    ),
    Family(
        id="leah-brent",
        name="Leah and Brent",
        members=[
            FamilyMember(name="Leah"),
            FamilyMember(name="Brent"),
            FamilyMember(name="Knox", note="oldest"),
            FamilyMember(name="Lucy", note="middle"),
            FamilyMember(name="June", note="youngest daughter"),
        ],
    ),
    Family(
        id="noah-cori",
        name="Noah and Cori",
        members=[
            FamilyMember(name="Noah"),
            FamilyMember(name="Corinne (Cori)"),
            FamilyMember(name="Rhema", note="daughter, oldest"),
            FamilyMember(name="Gideon", note="son, youngest"),
        ],
    ),
]


def family_ids(families: Optional[Iterable[Family]] = None) -> list[str]:
    """Ids of the given families (configured roster by default)."""
    return [f.id for f in (FAMILIES if families is None else families)]


def family_ids_with_all(families: Optional[Iterable[Family]] = None) -> list[str]:
    """Family ids preceded by the reserved 'all' id."""
    return [ALL_FAMILIES_ID, *family_ids(families)]
