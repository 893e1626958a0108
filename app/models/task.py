"""Task model"""

from sqlalchemy import Column, Integer, String, Date, DateTime, Boolean, ForeignKey
from datetime import datetime
from app.core.database import Base


PRIORITIES = ("high", "medium", "low")


class Task(Base):
    __tablename__ = "tasks"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    
    title = Column(String, nullable=False)
    done = Column(Boolean, nullable=False, default=False)
    priority = Column(String, nullable=False, default="medium")
    due_date = Column(Date, nullable=True, index=True)  # jour seulement, pas d'heure
    
    # Id de la tâche Google correspondante ; non null = tâche synchronisée
    remote_id = Column(String, nullable=True)
    
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    @property
    def is_linked(self) -> bool:
        return self.remote_id is not None
