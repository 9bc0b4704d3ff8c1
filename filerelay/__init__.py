"""
filerelay es un bot de Telegram que funciona como repositorio de archivos:

    El canal es el disco, la base de datos es el índice.

Cada archivo que recibe se reenvía a un canal de archivo y queda registrado
con un enlace `?start=` que cualquier usuario puede abrir para recuperarlo.
"""

__version__ = "0.1.0"
