"""Reference face embedding, one per student."""
from typing import List
from attendance_api import db
from attendance_api.models.base import BaseModel

class FaceEmbedding(BaseModel):
    """Latest enrolled embedding for a student."""

    __tablename__ = 'face_embeddings'

    student_id = db.Column(
        db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False, unique=True, index=True
    )
    embedding = db.Column(db.JSON, nullable=False)
    dimensions = db.Column(db.Integer, nullable=False)
    detector = db.Column(db.String(20), nullable=False, default='client')
    enrolled_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    @classmethod
    def for_student(cls, student_id: int) -> 'FaceEmbedding':
        return cls.query.filter_by(student_id=student_id).first()

    @classmethod
    def store(cls, student_id: int, vector: List[float], detector: str,
              enrolled_by: int = None) -> 'FaceEmbedding':
        """Create or replace the student's embedding."""
        record = cls.for_student(student_id)
        if record is None:
            record = cls(student_id=student_id)
            db.session.add(record)

        record.embedding = list(vector)
        record.dimensions = len(vector)
        record.detector = detector
        record.enrolled_by = enrolled_by
        db.session.commit()
        return record

    def to_dict(self, include_vector: bool = False):
        data = {
            'student_id': self.student_id,
            'dimensions': self.dimensions,
            'detector': self.detector,
            'enrolled_by': self.enrolled_by,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_vector:
            data['embedding'] = self.embedding
        return data
