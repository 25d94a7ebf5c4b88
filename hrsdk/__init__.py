"""Client for HIWIN robot controllers: command protocol, motion and state queries over TCP."""

__version__ = "0.1.0"

__all__ = ["tcp_client", "clients", "protocol", "commander", "driver"]