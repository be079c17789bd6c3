"""Restaurant model."""

from datetime import datetime
from slugify import slugify
from feedback_delivery.extensions import db

# Everything outside latin/cyrillic letters and digits turns into a hyphen
SLUG_DISALLOWED = r'[^-a-zа-я0-9]+'


def slugify_name(name):
    """URL-safe slug for a restaurant name, keeping cyrillic letters."""
    slug = slugify(name or '', allow_unicode=True, regex_pattern=SLUG_DISALLOWED)
    return slug or 'restaurant'


class Restaurant(db.Model):
    """Restaurant listing."""
    __tablename__ = 'restaurants'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), unique=True, nullable=False)
    slug = db.Column(db.String(120), unique=True, index=True)
    address = db.Column(db.String(255))
    description = db.Column(db.Text)
    image_url = db.Column(db.String(255))
    category = db.Column(db.String(100))
    price_range = db.Column(db.String(10))
    # Criterion name -> weight, set by administrators
    criteria = db.Column(db.JSON)
    rating = db.Column(db.Float, nullable=False, default=0.0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    deleted = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    reviews = db.relationship('Review', backref='restaurant', lazy='dynamic',
                              passive_deletes=True)

    @classmethod
    def unique_slug(cls, base_slug, exclude_id=None):
        """First free slug of base_slug, base_slug-1, base_slug-2, ..."""
        slug = base_slug
        counter = 1
        while True:
            query = cls.query.filter_by(slug=slug)
            if exclude_id is not None:
                query = query.filter(cls.id != exclude_id)
            if query.first() is None:
                return slug
            slug = f'{base_slug}-{counter}'
            counter += 1

    def generate_slug(self):
        """Generate a unique slug from the restaurant name."""
        self.slug = Restaurant.unique_slug(slugify_name(self.name), exclude_id=self.id)

    def update_rating(self):
        """Update restaurant rating based on non-deleted reviews."""
        reviews = self.reviews.filter_by(deleted=False).all()
        if reviews:
            self.rating = round(sum(r.rating for r in reviews) / len(reviews), 2)
        else:
            self.rating = 0.0

    def soft_delete(self):
        self.deleted = True
        self.is_active = False

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'slug': self.slug,
            'address': self.address,
            'description': self.description,
            'image_url': self.image_url,
            'category': self.category,
            'price_range': self.price_range,
            'criteria': self.criteria or {},
            'rating': self.rating,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Restaurant {self.name}>'
