from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any


class NetworkStats(BaseModel):
    total_connections: int = 0
    pending_received: int = 0
    pending_sent: int = 0


class ConnectRequest(BaseModel):
    company_unique_id: str = Field(..., min_length=1, description="ID público de la empresa a conectar")
    message: Optional[str] = Field(None, max_length=500)


class NetworkOverview(BaseModel):
    """
    Conexiones, solicitudes y estadísticas de la red.

    Cada fuente se carga por separado: si una falla queda vacía y su error
    se informa en `errors`, las demás se muestran igual.
    """
    connections: List[Dict[str, Any]] = Field(default_factory=list)
    pending_requests: List[Dict[str, Any]] = Field(default_factory=list)
    sent_requests: List[Dict[str, Any]] = Field(default_factory=list)
    stats: NetworkStats = Field(default_factory=NetworkStats)
    errors: Dict[str, str] = Field(default_factory=dict)
