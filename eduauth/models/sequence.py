from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import BigInteger, Integer
from eduauth.db.base_class import Base

COUNTER_ID = 1

class CertificateSequence(Base):
    __tablename__ = "certificate_sequences"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False, default=COUNTER_ID)
    last_sequence: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
