"""
forja: convergencia declarativa de hosts.

Una receta declara recursos (archivos, directorios, comandos, units systemd...);
el engine los lleva a su estado deseado en orden, con guardas y notificaciones.
"""

__version__ = "0.1.0"
