from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

import config
from models.profile import UserProfileBase


class UserInDB(BaseModel):
    """Represents the full user document as stored in Firestore."""

    uid: str
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    created_at: datetime = Field(alias="createdAt")
    time_zone: str = Field(
        default=config.DEFAULT_TIME_ZONE,
        alias="timeZone",
        description="IANA zone the user's device currently reports.",
    )
    profile: Optional[UserProfileBase] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
