"""Error report model."""

from datetime import datetime
from feedback_delivery.extensions import db

REPORT_STATUSES = ('pending', 'resolved', 'rejected')


class ErrorReport(db.Model):
    """User-submitted flag on a review."""
    __tablename__ = 'error_reports'

    id = db.Column(db.Integer, primary_key=True)
    review_id = db.Column(db.Integer, db.ForeignKey('reviews.id', ondelete='CASCADE'))
    reporter_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    reason = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(20), nullable=False, default='pending')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    resolved_at = db.Column(db.DateTime)
    resolved_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    resolution_notes = db.Column(db.Text)

    reporter = db.relationship('User', foreign_keys=[reporter_id])
    resolver = db.relationship('User', foreign_keys=[resolved_by])

    def resolve(self, user, status, notes=None):
        """Close the report as resolved or rejected."""
        if status not in ('resolved', 'rejected'):
            raise ValueError(f'Invalid resolution status: {status!r}')
        self.status = status
        self.resolved_by = user.id
        self.resolved_at = datetime.utcnow()
        self.resolution_notes = notes

    def to_dict(self):
        return {
            'id': self.id,
            'review_id': self.review_id,
            'reporter_id': self.reporter_id,
            'reason': self.reason,
            'status': self.status,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
            'resolved_by': self.resolved_by,
            'resolution_notes': self.resolution_notes,
        }

    def __repr__(self):
        return f'<ErrorReport {self.id} {self.status}>'
