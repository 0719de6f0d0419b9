from dataclasses import dataclass, field
from typing import Any


@dataclass
class User:
    id: str
    nickname: str
    email: str
    password_hash: str
    password_salt: str
    created_at: str

    def profile(self) -> dict[str, str]:
        return {"nickname": self.nickname, "email": self.email}


@dataclass
class Challenge:
    id: str
    user_id: str
    title: str
    category: str
    plan: str
    days: list[bool] = field(default_factory=lambda: [False, False, False])
    current_day: int = 0
    is_complete: bool = False
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "challengeId": self.id,
            "title": self.title,
            "category": self.category,
            "plan": self.plan,
            "days": list(self.days),
            "currentDay": self.current_day,
            "isComplete": self.is_complete,
            "createdAt": self.created_at,
        }


@dataclass
class Proof:
    challenge_id: str
    day_index: int
    image_base64: str
    uploaded_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "dayIndex": self.day_index,
            "imageBase64": self.image_base64,
            "uploadedAt": self.uploaded_at,
        }
