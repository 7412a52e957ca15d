"""Track resolution, option compilers and command assembly."""
