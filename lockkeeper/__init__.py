"""lockkeeper — manifest extraction and lock file regeneration core."""

__version__ = "0.1.0"
