from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from app.models.doctor import DoctorStatus

class SpecialtyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=300)

class SpecialtyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None

class DoctorCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    degree: str = Field(..., min_length=1, max_length=100)
    doctor_id: str = Field(..., min_length=1, max_length=50)
    specialty_id: int = Field(..., ge=1)
    status: DoctorStatus = DoctorStatus.ACTIVE

class DoctorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    degree: str
    doctor_id: str
    specialty_id: int
    status: DoctorStatus
