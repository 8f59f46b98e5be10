from reelcart.database import Base
from reelcart.models.user import User, UserRole
from reelcart.models.category import Category
from reelcart.models.host import Host
from reelcart.models.movie import Movie, MovieHost

# This ensures all models are registered with Base.metadata
__all__ = [
    "Base", "User", "UserRole", "Category", "Host", "Movie", "MovieHost",
]
