"""Version information for schemagov."""

VERSION = "0.1.0"
