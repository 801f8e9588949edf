from __future__ import annotations
from dataclasses import dataclass

# ====== App identity (used by API + exports) ======
APP_NAME: str = "ReciboWatch"
APP_VERSION: str = "1.2.0"
AUTHOR_EMAIL: str = "auditoria@recibowatch.local"

@dataclass
class Settings:
    # Profiles scoring at or above this value are flagged in the summary
    high_risk_threshold: int = 70
    # Literal subject name the source system writes for unresolved identities
    unknown_sentinel: str = "Desconocido"
    items_per_page: int = 10
    export_file_name: str = "analisis_consultas_recibos"
