from typing import Any, Dict, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class ThreadCreate(BaseModel):
    # required fields are checked by the route so the 400 can list them
    post_title: Optional[str] = Field(None, validation_alias=AliasChoices("post_title", "postTitle"))
    post_description: Optional[str] = Field(
        None, validation_alias=AliasChoices("post_description", "postDescription")
    )
    author_email: Optional[str] = Field(None, validation_alias=AliasChoices("author_email", "authorEmail"))
    author_name: Optional[str] = Field(None, validation_alias=AliasChoices("author_name", "authorName"))
    category: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class LikeToggleRequest(BaseModel):
    user_email: str = Field(..., min_length=1, validation_alias=AliasChoices("user_email", "userEmail"))


class CommentRequest(BaseModel):
    new_comment: Dict[str, Any] = Field(..., validation_alias=AliasChoices("new_comment", "newComment"))
