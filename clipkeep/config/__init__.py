"""
Configuration for ClipKeep.
"""

from .settings import AppSettings, get_app_dir, get_default_settings_path

__all__ = ['AppSettings', 'get_app_dir', 'get_default_settings_path']
