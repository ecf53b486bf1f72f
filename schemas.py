"""Pydantic schemas for requests.

We define only the request bodies here.  Responses are plain dicts built
from the entity models with ``model_dump(mode="json")``.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class PatientCreate(BaseModel):
    hn: str
    name: str
    arrival_time: Optional[datetime] = None


class AddQueueRequest(BaseModel):
    patient: str = Field(description="Patient id or HN")
    room_id: str


class MoveQueueRequest(BaseModel):
    patient_id: str
    room_id: str


class CallQueueRequest(BaseModel):
    room_id: str
    queue_number: int = Field(ge=1)


class RoomCreate(BaseModel):
    name: str
    floor: Optional[str] = None
    department: Optional[str] = None


class RoomUpdate(BaseModel):
    name: Optional[str] = None
    floor: Optional[str] = None
    department: Optional[str] = None


class DoctorCreate(BaseModel):
    name: str
    specialization: Optional[str] = None
    license_number: Optional[str] = None
    room_id: Optional[str] = None


class DoctorUpdate(BaseModel):
    name: Optional[str] = None
    specialization: Optional[str] = None
    license_number: Optional[str] = None


class AssignDoctorRequest(BaseModel):
    room_id: Optional[str] = None


class ActiveRequest(BaseModel):
    active: bool
