from .auth import GitHubAuth

__all__ = ['GitHubAuth']
