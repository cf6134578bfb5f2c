"""Infrastructure - database session management, repositories, logging setup."""
