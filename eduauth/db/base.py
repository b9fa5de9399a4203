# eduauth/db/base.py
from eduauth.db.base_class import Base  # mantém

# Carrega módulos para registrar tabelas no metadata:
import eduauth.models  # noqa: F401

__all__ = ["Base"]
