"""
Students API routes - CRUD endpoints under /Students.

Provides endpoints for:
- Listing all students
- Fetching a student by id (200 with a null body when absent)
- Creating a student (201 with a Location header)
- Updating a student (404 when absent, or create-on-put in upsert mode)
- Deleting a student (202, empty body)
"""

import uuid
import time
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlalchemy.orm import Session

from students_api.database import get_db
from students_api.models.student import Student
from students_api.services.student_repository import StudentRepository
from students_api.logging_config import get_logger, log_event

router = APIRouter()
logger = get_logger("http")


# ── Pydantic schemas ─────────────────────────────────────────

# Body keys are matched ignoring case and underscores: FirstName, firstName,
# firstname and first_name all bind to first_name.
_BODY_KEYS = {
    "firstname": "first_name",
    "lastname": "last_name",
    "program": "program",
}


class StudentBase(BaseModel):
    """Request body for create and update; copied field by field into a Student."""
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "examples": [{"FirstName": "FirstName", "LastName": "LastName", "Program": "Program"}]
        },
    )

    first_name: str = Field(..., description="First name (required)")
    last_name: str = Field(..., description="Last name (required)")
    program: Optional[str] = Field(None, description="Program of study")

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data):
        if not isinstance(data, dict):
            return data
        normalized = {}
        for key, value in data.items():
            field_name = _BODY_KEYS.get(str(key).replace("_", "").lower())
            if field_name is not None:
                normalized[field_name] = value
        return normalized

    @field_validator("first_name", "last_name")
    @classmethod
    def require_non_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("field is required")
        return value


ERROR_RESPONSES = {
    400: {"description": "Malformed id or request body"},
    500: {"description": "Internal error"},
}
NOT_FOUND_RESPONSE = {404: {"description": "Student not found"}}


def serialize_student(student: Student) -> dict:
    """Serialize a Student ORM object to a dict for API response."""
    return {
        "id": str(student.id),
        "firstName": student.first_name,
        "lastName": student.last_name,
        "program": student.program,
    }


def get_student_repository(db: Session = Depends(get_db)) -> StudentRepository:
    return StudentRepository(db)


def _created_response(request: Request, student: Student) -> JSONResponse:
    location = str(request.url_for("get_student", student_id=str(student.id)))
    return JSONResponse(
        status_code=201,
        content=serialize_student(student),
        headers={"Location": location},
    )


@router.get("/Students", responses={500: ERROR_RESPONSES[500]})
def list_students(repo: StudentRepository = Depends(get_student_repository)):
    """Get the collection of students."""
    start_time = time.time()
    students = repo.list()

    duration_ms = (time.time() - start_time) * 1000
    log_event(logger, "INFO", "Listed {} students".format(len(students)),
        extra_data={"duration_ms": round(duration_ms, 2)})

    return [serialize_student(s) for s in students]


@router.get("/Students/{student_id}", name="get_student", responses=ERROR_RESPONSES)
def get_student(student_id: uuid.UUID, repo: StudentRepository = Depends(get_student_repository)):
    """Get a student by id. An unknown id yields a null body."""
    student = repo.get_by_id(str(student_id))
    if student is None:
        return None
    return serialize_student(student)


@router.post("/Students", status_code=201, responses=ERROR_RESPONSES)
def create_student(payload: StudentBase, request: Request,
                   repo: StudentRepository = Depends(get_student_repository)):
    """
    Create a student.

    Sample request:

        POST /Students
        {
            "FirstName": "FirstName",
            "LastName": "LastName",
            "Program": "Program"
        }
    """
    student = Student(
        id=str(uuid.uuid4()),
        first_name=payload.first_name,
        last_name=payload.last_name,
        program=payload.program
    )
    repo.add(student)
    repo.commit()
    repo.refresh(student)

    log_event(logger, "INFO", "Student created",
        student_id=student.id)

    return _created_response(request, student)


@router.put(
    "/Students/{student_id}",
    responses={
        201: {"description": "Student created (upsert mode only)"},
        **NOT_FOUND_RESPONSE,
        **ERROR_RESPONSES,
    },
)
def update_student(student_id: uuid.UUID, payload: StudentBase, request: Request,
                   repo: StudentRepository = Depends(get_student_repository)):
    """
    Update a student, overwriting all three fields.

    An unknown id yields 404, unless upsert mode is enabled, in which case
    the student is created with the given id and 201 is returned.
    """
    student = repo.get_by_id(str(student_id))

    if student is None:
        if not request.app.state.settings.put_upsert:
            raise HTTPException(status_code=404, detail="Student not found")

        student = Student(
            id=str(student_id),
            first_name=payload.first_name,
            last_name=payload.last_name,
            program=payload.program
        )
        repo.add(student)
        repo.commit()
        repo.refresh(student)

        log_event(logger, "INFO", "Student created by upsert",
            student_id=student.id)
        return _created_response(request, student)

    student.first_name = payload.first_name
    student.last_name = payload.last_name
    student.program = payload.program

    student = repo.update(student)
    repo.commit()
    repo.refresh(student)

    log_event(logger, "INFO", "Student updated",
        student_id=student.id)

    return serialize_student(student)


@router.delete(
    "/Students/{student_id}",
    status_code=202,
    responses={**NOT_FOUND_RESPONSE, **ERROR_RESPONSES},
)
def delete_student(student_id: uuid.UUID, repo: StudentRepository = Depends(get_student_repository)):
    """Delete a student."""
    student = repo.get_by_id(str(student_id))
    if student is None:
        raise HTTPException(status_code=404, detail="Student not found")

    repo.remove(student)
    repo.commit()

    log_event(logger, "INFO", "Student deleted",
        student_id=str(student_id))

    return Response(status_code=202)
