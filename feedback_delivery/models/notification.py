"""Notification model."""

from datetime import datetime
from feedback_delivery.extensions import db


class Notification(db.Model):
    """User notifications."""
    __tablename__ = 'notifications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(50), default='system')  # review, response, moderation, system
    link = db.Column(db.String(255))
    is_read = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    @staticmethod
    def new_review(manager_id, review):
        """Tell a manager about a new review of their restaurant."""
        return Notification(
            user_id=manager_id,
            title=f'New review for {review.restaurant.name}',
            message=f'A guest rated {review.restaurant.name} {review.rating}/5.',
            type='review',
            link=f'/reviews/{review.id}'
        )

    @staticmethod
    def review_answered(review):
        """Tell the author that the restaurant answered."""
        return Notification(
            user_id=review.user_id,
            title=f'{review.restaurant.name} answered your review',
            message=review.response_text,
            type='response',
            link=f'/reviews/{review.id}'
        )

    @staticmethod
    def review_removed(review, reason):
        return Notification(
            user_id=review.user_id,
            title='Your review was removed',
            message=f'Your review of {review.restaurant.name} was removed. Reason: {reason}',
            type='moderation'
        )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'message': self.message,
            'type': self.type,
            'link': self.link,
            'is_read': self.is_read,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Notification {self.title}>'
