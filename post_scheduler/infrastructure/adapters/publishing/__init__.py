from .twitter_publisher import TwitterPublisher

__all__ = ["TwitterPublisher"]
