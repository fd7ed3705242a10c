"""
Student model - the single resource exposed by the API.

Each student is identified by a server-generated UUID stored as a string.
Column names follow the `Student` table layout: ID, FirstName, LastName,
Program.
"""

import uuid
from sqlalchemy import Column, Text, String
from students_api.database import Base


class Student(Base):
    """
    SQLAlchemy model for the Student table.

    First and last name are required at input binding; Program is optional.
    """
    __tablename__ = "Student"

    id = Column("ID", String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier, immutable after creation")
    first_name = Column("FirstName", Text, nullable=False,
                        doc="Student's first name")
    last_name = Column("LastName", Text, nullable=False,
                       doc="Student's last name")
    program = Column("Program", Text, nullable=True,
                     doc="Program of study (nullable)")

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.first_name} {self.last_name}', program='{self.program}')>"
