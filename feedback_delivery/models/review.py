"""Review, DeletedReview and ManagerResponse models."""

from datetime import datetime
from feedback_delivery.extensions import db

REVIEW_TYPES = ('inRestaurant', 'delivery')

# Per-criterion scores, 0 when the reviewer skipped the criterion
CRITERIA_FIELDS = ('food_rating', 'service_rating', 'atmosphere_rating',
                   'price_rating', 'cleanliness_rating')


class Review(db.Model):
    """Review of a restaurant, optionally answered by its manager."""
    __tablename__ = 'reviews'
    __table_args__ = (
        db.CheckConstraint('rating >= 1 AND rating <= 5', name='reviews_rating_range'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    restaurant_id = db.Column(db.Integer, db.ForeignKey('restaurants.id', ondelete='CASCADE'),
                              nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    rating = db.Column(db.Integer, nullable=False)  # 1-5
    food_rating = db.Column(db.Integer, nullable=False, default=0)
    service_rating = db.Column(db.Integer, nullable=False, default=0)
    atmosphere_rating = db.Column(db.Integer, nullable=False, default=0)
    price_rating = db.Column(db.Integer, nullable=False, default=0)
    cleanliness_rating = db.Column(db.Integer, nullable=False, default=0)
    type = db.Column(db.String(20), nullable=False, default='inRestaurant')
    deleted = db.Column(db.Boolean, nullable=False, default=False)
    # Manager's reply
    responded_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    response_text = db.Column(db.Text)
    response_date = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    responder = db.relationship('User', foreign_keys=[responded_by])
    manager_response = db.relationship('ManagerResponse', backref='review', uselist=False,
                                       passive_deletes=True)
    error_reports = db.relationship('ErrorReport', backref='review', lazy='dynamic',
                                    passive_deletes=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.author.name if self.author else None,
            'restaurant_id': self.restaurant_id,
            'restaurant_name': self.restaurant.name if self.restaurant else None,
            'content': self.content,
            'rating': self.rating,
            'type': self.type,
            'criteria_ratings': {name: getattr(self, name) or 0 for name in CRITERIA_FIELDS},
            'response_text': self.response_text,
            'response_date': self.response_date.isoformat() if self.response_date else None,
            'responded_by': self.responded_by,
            'manager_name': self.responder.name if self.responder else None,
            'has_response': self.response_text is not None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Review {self.rating} stars>'


class DeletedReview(db.Model):
    """Archived copy of a review removed by moderation."""
    __tablename__ = 'deleted_reviews'

    id = db.Column(db.Integer, primary_key=True)
    original_id = db.Column(db.Integer, index=True)
    user_id = db.Column(db.Integer)
    restaurant_id = db.Column(db.Integer, db.ForeignKey('restaurants.id', ondelete='SET NULL'))
    content = db.Column(db.Text, nullable=False)
    rating = db.Column(db.Integer)
    created_at = db.Column(db.DateTime)
    deleted_at = db.Column(db.DateTime, default=datetime.utcnow)
    deleted_by = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='SET NULL'))
    deletion_reason = db.Column(db.Text)

    moderator = db.relationship('User', foreign_keys=[deleted_by])

    @classmethod
    def from_review(cls, review, deleted_by, reason):
        return cls(
            original_id=review.id,
            user_id=review.user_id,
            restaurant_id=review.restaurant_id,
            content=review.content,
            rating=review.rating,
            created_at=review.created_at,
            deleted_by=deleted_by.id,
            deletion_reason=reason,
        )

    def to_dict(self):
        return {
            'id': self.id,
            'original_id': self.original_id,
            'user_id': self.user_id,
            'restaurant_id': self.restaurant_id,
            'content': self.content,
            'rating': self.rating,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'deleted_at': self.deleted_at.isoformat() if self.deleted_at else None,
            'deleted_by': self.deleted_by,
            'deleted_by_name': self.moderator.name if self.moderator else None,
            'deletion_reason': self.deletion_reason,
        }


class ManagerResponse(db.Model):
    """A manager's answer to a review, one per review."""
    __tablename__ = 'manager_responses'

    id = db.Column(db.Integer, primary_key=True)
    review_id = db.Column(db.Integer, db.ForeignKey('reviews.id', ondelete='CASCADE'),
                          nullable=False, unique=True)
    manager_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                           nullable=False)
    response_text = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    manager = db.relationship('User', foreign_keys=[manager_id])

    def to_dict(self):
        return {
            'id': self.id,
            'review_id': self.review_id,
            'manager_id': self.manager_id,
            'manager_name': self.manager.name if self.manager else None,
            'response_text': self.response_text,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
