"""
Student repository - collection-style access to the Student table.

Wraps a single SQLAlchemy session (one unit of work per request). Lookups
have three outcomes: a Student when found, None when absent, and
StorageError when the database fails. Mutations are staged with add, update
or remove and written by commit.
"""

import time
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from students_api.errors import StorageError
from students_api.models.student import Student
from students_api.logging_config import get_logger, log_event

logger = get_logger("db")


class StudentRepository:
    def __init__(self, db: Session):
        self.db = db

    def list(self) -> List[Student]:
        """Return every student; order is unspecified."""
        start_time = time.time()
        try:
            students = self.db.scalars(select(Student)).all()
        except SQLAlchemyError as e:
            raise StorageError("list", e) from e

        duration_ms = (time.time() - start_time) * 1000
        log_event(logger, "DEBUG", "Loaded {} students".format(len(students)),
                  extra_data={"duration_ms": round(duration_ms, 2)})
        return students

    def get_by_id(self, student_id: str) -> Optional[Student]:
        try:
            return self.db.get(Student, student_id)
        except SQLAlchemyError as e:
            raise StorageError("get_by_id", e) from e

    def add(self, student: Student) -> Student:
        try:
            self.db.add(student)
        except SQLAlchemyError as e:
            raise StorageError("add", e) from e
        return student

    def update(self, student: Student) -> Student:
        """Stage changes made to `student`, attaching it to the session if detached."""
        try:
            return self.db.merge(student)
        except SQLAlchemyError as e:
            raise StorageError("update", e) from e

    def remove(self, student: Student):
        try:
            self.db.delete(student)
        except SQLAlchemyError as e:
            raise StorageError("remove", e) from e

    def commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError("commit", e) from e

    def refresh(self, student: Student) -> Student:
        try:
            self.db.refresh(student)
        except SQLAlchemyError as e:
            raise StorageError("refresh", e) from e
        return student
