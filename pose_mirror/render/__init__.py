from .avatar import AvatarRenderer
from .overlay import MonitorOverlayRenderer, composite

__all__ = ['AvatarRenderer', 'MonitorOverlayRenderer', 'composite']
