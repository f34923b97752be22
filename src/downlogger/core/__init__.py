"""Core building blocks of downlogger: buffer, sinks, timer and lifecycle."""
