"""User model and role hierarchy."""

from datetime import datetime
from flask_login import UserMixin
from sqlalchemy.orm import validates
from feedback_delivery.extensions import db, bcrypt


ROLES = ('user', 'manager', 'admin', 'head_admin')

ROLE_LEVELS = {
    'head_admin': 100,
    'admin': 80,
    'manager': 50,
    'user': 10,
}


def role_level(role):
    """Access level of a role name, 0 for unknown roles."""
    return ROLE_LEVELS.get(role, 0)


class User(UserMixin, db.Model):
    """User model for reviewers, restaurant managers and administrators."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), nullable=False)
    email = db.Column(db.String(100), unique=True, nullable=False, index=True)
    password = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='user')
    is_blocked = db.Column(db.Boolean, nullable=False, default=False)
    blocked_reason = db.Column(db.String(255))
    restaurant_id = db.Column(db.Integer, db.ForeignKey('restaurants.id', ondelete='SET NULL'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    restaurant = db.relationship('Restaurant', foreign_keys=[restaurant_id], backref='managers')
    reviews = db.relationship('Review', backref='author', lazy='dynamic',
                              foreign_keys='Review.user_id', passive_deletes=True)
    notifications = db.relationship('Notification', backref='user', lazy='dynamic',
                                    cascade='all, delete-orphan')

    @validates('role')
    def validate_role(self, key, role):
        if role not in ROLES:
            raise ValueError(f'Invalid role: {role!r}')
        return role

    def set_password(self, password):
        """Hash and set the password."""
        self.password = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        """Check if password matches."""
        return bcrypt.check_password_hash(self.password, password)

    @property
    def level(self):
        return role_level(self.role)

    def has_role(self, required):
        """True when this user's level reaches the required role's level."""
        return self.level >= role_level(required)

    def is_manager(self):
        return self.role == 'manager'

    def is_admin(self):
        """Admins and the head admin."""
        return self.level >= ROLE_LEVELS['admin']

    def change_role(self, role):
        """Set a new role; leaving the manager role detaches the restaurant."""
        self.role = role
        if role != 'manager':
            self.restaurant_id = None

    def assign_restaurant(self, restaurant):
        """Attach a manager to a restaurant, or detach with None."""
        if restaurant is not None and self.role != 'manager':
            raise ValueError('Only managers can be attached to a restaurant')
        self.restaurant_id = restaurant.id if restaurant is not None else None

    def block(self, reason):
        self.is_blocked = True
        self.blocked_reason = reason

    def unblock(self):
        self.is_blocked = False
        self.blocked_reason = None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'role': self.role,
            'is_blocked': self.is_blocked,
            'blocked_reason': self.blocked_reason,
            'restaurant_id': self.restaurant_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<User {self.email}>'
