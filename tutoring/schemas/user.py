from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    id: str
    admin: bool


class UserAccessToken(BaseModel):
    model_config = ConfigDict(extra="ignore")

    uid: str
    admin: bool = False

    def to_user(self) -> User:
        return User(id=self.uid, admin=self.admin)
