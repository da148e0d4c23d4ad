# attendease/logic_models.py
from __future__ import annotations
import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

AttendanceMethod = Literal["APP", "MANUAL"]
AttendanceStatus = Literal["BOOKED", "ATTENDED", "WAITLISTED"]
PaymentStatus = Literal["SUCCESS", "PENDING"]

BOOKED = "BOOKED"
ATTENDED = "ATTENDED"
WAITLISTED = "WAITLISTED"


class Role(str, Enum):
    ADMIN = "ADMIN"
    TRAINER = "TRAINER"
    TRAINEE = "TRAINEE"


def is_staff(role) -> bool:
    """ADMIN and TRAINER act on behalf of trainees; TRAINEE is self-service."""
    return Role(role) in (Role.ADMIN, Role.TRAINER)


def new_id() -> str:
    return uuid.uuid4().hex[:9]


def epoch_ms(now: datetime) -> int:
    return int(now.timestamp() * 1000)


@dataclass
class User:
    id: str
    email: str
    name: str
    role: Role
    password: Optional[str] = None
    phone_number: Optional[str] = None
    credits: Optional[int] = None

    @property
    def is_trainee(self) -> bool:
        return self.role == Role.TRAINEE

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
        }
        if self.password is not None:
            out["password"] = self.password
        if self.phone_number is not None:
            out["phoneNumber"] = self.phone_number
        if self.credits is not None:
            out["credits"] = self.credits
        return out

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        role = Role(d.get("role", Role.TRAINEE.value))
        credits = d.get("credits")
        if role == Role.TRAINEE:
            credits = int(credits or 0)
        else:
            credits = None
        return cls(
            id=str(d["id"]),
            email=d.get("email", ""),
            name=d.get("name", ""),
            role=role,
            password=d.get("password"),
            phone_number=d.get("phoneNumber"),
            credits=credits,
        )


@dataclass
class ClassSession:
    id: str
    trainer_id: str
    name: str
    date: str            # YYYY-MM-DD
    time: str            # HH:MM
    location: str = ""
    max_capacity: Optional[int] = None   # None = unlimited
    created_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "trainerId": self.trainer_id,
            "name": self.name,
            "date": self.date,
            "time": self.time,
            "location": self.location,
            "maxCapacity": self.max_capacity,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ClassSession":
        cap = d.get("maxCapacity")
        return cls(
            id=str(d["id"]),
            trainer_id=str(d.get("trainerId", "")),
            name=d.get("name", ""),
            date=d.get("date", ""),
            time=d.get("time", ""),
            location=d.get("location", ""),
            max_capacity=int(cap) if cap not in (None, "") else None,
            created_at=int(d.get("createdAt") or 0),
        )


@dataclass
class AttendanceRecord:
    id: str
    class_id: str
    trainee_id: str
    timestamp: int
    method: AttendanceMethod = "APP"
    status: AttendanceStatus = BOOKED

    @property
    def holds_seat(self) -> bool:
        return self.status != WAITLISTED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "classId": self.class_id,
            "traineeId": self.trainee_id,
            "timestamp": self.timestamp,
            "method": self.method,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AttendanceRecord":
        return cls(
            id=str(d["id"]),
            class_id=str(d["classId"]),
            trainee_id=str(d["traineeId"]),
            timestamp=int(d.get("timestamp") or 0),
            method=d.get("method", "APP"),
            status=d.get("status", BOOKED),
        )


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    trainee_id: str
    amount: float
    credits: int
    timestamp: int
    status: PaymentStatus = "SUCCESS"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "traineeId": self.trainee_id,
            "amount": self.amount,
            "credits": self.credits,
            "timestamp": self.timestamp,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PaymentRecord":
        return cls(
            id=str(d["id"]),
            trainee_id=str(d["traineeId"]),
            amount=d.get("amount", 0),
            credits=int(d.get("credits") or 0),
            timestamp=int(d.get("timestamp") or 0),
            status=d.get("status", "SUCCESS"),
        )


@dataclass
class CreditPackage:
    id: str
    name: str
    credits: int
    price: float

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "credits": self.credits, "price": self.price}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CreditPackage":
        return cls(
            id=str(d["id"]),
            name=d.get("name", ""),
            credits=int(d.get("credits") or 0),
            price=d.get("price", 0),
        )


@dataclass
class AppState:
    """
    Whole application snapshot. Serialises to the single JSON document
    the storage layer persists (users / classes / attendance / payments / packages).
    """
    users: List[User] = field(default_factory=list)
    classes: List[ClassSession] = field(default_factory=list)
    attendance: List[AttendanceRecord] = field(default_factory=list)
    payments: List[PaymentRecord] = field(default_factory=list)
    packages: List[CreditPackage] = field(default_factory=list)

    # --- Lookups ---

    def find_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)

    def find_class(self, class_id: str) -> Optional[ClassSession]:
        return next((c for c in self.classes if c.id == class_id), None)

    def find_record(self, class_id: str, trainee_id: str) -> Optional[AttendanceRecord]:
        return next(
            (a for a in self.attendance if a.class_id == class_id and a.trainee_id == trainee_id),
            None,
        )

    def records_for(self, class_id: str) -> List[AttendanceRecord]:
        return [a for a in self.attendance if a.class_id == class_id]

    def find_package(self, package_id: str) -> Optional[CreditPackage]:
        return next((p for p in self.packages if p.id == package_id), None)

    def copy(self) -> "AppState":
        return copy.deepcopy(self)

    # --- JSON document ---

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": [u.to_dict() for u in self.users],
            "classes": [c.to_dict() for c in self.classes],
            "attendance": [a.to_dict() for a in self.attendance],
            "payments": [p.to_dict() for p in self.payments],
            "packages": [p.to_dict() for p in self.packages],
        }

    @classmethod
    def from_dict(cls, d: Optional[Dict[str, Any]]) -> "AppState":
        d = d or {}
        return cls(
            users=[User.from_dict(x) for x in d.get("users") or []],
            classes=[ClassSession.from_dict(x) for x in d.get("classes") or []],
            attendance=[AttendanceRecord.from_dict(x) for x in d.get("attendance") or []],
            payments=[PaymentRecord.from_dict(x) for x in d.get("payments") or []],
            packages=[CreditPackage.from_dict(x) for x in d.get("packages") or []],
        )
