# errors.py


class CinemaError(Exception):
    """Base class for failures reported back to API callers."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CatalogSyncError(CinemaError):
    pass


class MovieConflictError(CinemaError):
    """Another writer created the same movie and its row could not be read back."""

    def __init__(self, movie_id: str):
        super().__init__(f"Movie {movie_id} was created concurrently and could not be reconciled")
        self.movie_id = movie_id


class ScheduleError(CinemaError):
    pass


class ShowPersistenceError(CinemaError):
    pass


class MovieNotFoundError(CinemaError):
    def __init__(self, movie_id: str):
        super().__init__(f"Movie {movie_id} not found")
        self.movie_id = movie_id
