import logging

from kitty_rc.config import get_logging_level

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(level: str | int | None = None) -> logging.Logger:
	"""Attach a stream handler to the kitty_rc logger.

	Args:
		level: Level name or number. Defaults to KITTY_RC_LOGGING_LEVEL, or warning.

	Returns:
		The configured package logger. Calling this again only changes the level.
	"""
	if level is None:
		level = get_logging_level()
	if isinstance(level, str):
		level = logging.getLevelNamesMapping().get(level.upper(), logging.WARNING)

	logger = logging.getLogger('kitty_rc')
	logger.setLevel(level)
	if not any(getattr(handler, '_kitty_rc', False) for handler in logger.handlers):
		handler = logging.StreamHandler()
		handler.setFormatter(logging.Formatter(LOG_FORMAT))
		handler._kitty_rc = True  # type: ignore[attr-defined]
		logger.addHandler(handler)
	logger.propagate = False
	return logger
