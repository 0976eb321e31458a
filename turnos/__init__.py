# turnos/__init__.py
__version__ = "3.0.0"
