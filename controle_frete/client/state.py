# controle_frete/client/state.py
# Containers explícitos do estado do cliente (fretes e preços), sem variáveis globais.

import threading
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Tuple

from controle_frete.domain.observacao import Observacao, load_observacoes_lenient
from controle_frete.services.frete_status import late_records
from controle_frete.services.frete_views import (
    FreteFilters, filter_fretes, dashboard, filter_options, month_start, shift_month, MESES,
)

Record = Dict[str, Any]


def _same_id(record: Record, record_id: Any) -> bool:
    return str(record.get('id')) == str(record_id)


class _RecordList:
    """Lista de registros (formato da API) protegida por lock; o loop de sincronização escreve de outra thread."""

    def __init__(self):
        self._lock = threading.RLock()
        self.records: List[Record] = []
        self.fingerprint: Optional[str] = None

    def replace_all(self, records: List[Record], fingerprint: Optional[str] = None):
        with self._lock:
            self.records = [dict(r) for r in records]
            if fingerprint is not None:
                self.fingerprint = fingerprint

    def snapshot(self) -> List[Record]:
        with self._lock:
            return [dict(r) for r in self.records]

    def find(self, record_id: Any) -> Optional[Record]:
        with self._lock:
            for record in self.records:
                if _same_id(record, record_id):
                    return dict(record)
            return None

    def index_of(self, record_id: Any) -> int:
        with self._lock:
            for index, record in enumerate(self.records):
                if _same_id(record, record_id):
                    return index
            return -1

    def upsert(self, record: Record, position: Optional[int] = None):
        """Substitui o registro de mesmo id; se não existir, insere (no fim, ou na posição indicada)."""
        with self._lock:
            index = self.index_of(record.get('id'))
            if index >= 0:
                self.records[index] = dict(record)
            elif position is None:
                self.records.append(dict(record))
            else:
                self.records.insert(position, dict(record))

    def remove(self, record_id: Any) -> Optional[Tuple[int, Record]]:
        """Remove e devolve (posição, registro), ou None se não existir."""
        with self._lock:
            index = self.index_of(record_id)
            if index < 0:
                return None
            return index, self.records.pop(index)

    def insert_at(self, index: int, record: Record):
        """Reinsere na posição dada. Se o id já voltou por uma recarga do servidor, mantém a cópia do servidor."""
        with self._lock:
            if self.index_of(record.get('id')) >= 0:
                return
            index = max(0, min(index, len(self.records)))
            self.records.insert(index, dict(record))


class FreteState(_RecordList):
    """Estado da tela de fretes: registros, mês corrente e filtros."""

    def __init__(self, today: Callable[[], date] = date.today):
        super().__init__()
        self._today = today
        self.month: date = month_start(today())
        self.filters = FreteFilters()

    def set_filters(self, **changes: str):
        values = {
            'search': self.filters.search,
            'transportadora': self.filters.transportadora,
            'vendedor': self.filters.vendedor,
            'status': self.filters.status,
        }
        values.update({k: (v or '') for k, v in changes.items()})
        self.filters = FreteFilters(**values)

    def change_month(self, delta: int) -> date:
        self.month = shift_month(self.month, delta)
        return self.month

    @property
    def month_label(self) -> str:
        return f"{MESES[self.month.month - 1]} {self.month.year}"

    def visible(self) -> List[Record]:
        return filter_fretes(self.snapshot(), self.month, self.filters, self._today())

    def dashboard(self) -> Dict[str, Any]:
        return dashboard(self.snapshot(), self.month, self._today())

    def late(self) -> List[Record]:
        return late_records(self.snapshot(), self._today())

    def filter_options(self) -> Dict[str, List[str]]:
        return filter_options(self.snapshot(), self._today())

    def observacoes(self, frete_id: Any) -> List[Observacao]:
        """Observações do frete para exibição; entradas ilegíveis vêm marcadas (legivel=False)."""
        record = self.find(frete_id)
        if record is None:
            return []
        return load_observacoes_lenient(record.get('observacoes'))


class PrecoState(_RecordList):
    """Estado da tabela de preços: página corrente e filtros do servidor."""

    def __init__(self, page_size: int = 50):
        super().__init__()
        self.page = 1
        self.page_size = page_size
        self.total = 0
        self.total_pages = 0
        self.marca = 'TODAS'
        self.search = ''

    def replace_page(self, payload: Dict[str, Any], fingerprint: Optional[str] = None):
        self.replace_all(payload.get('data') or [], fingerprint)
        self.total = int(payload.get('total') or 0)
        self.page = int(payload.get('page') or self.page)
        self.total_pages = int(payload.get('totalPages') or 0)

    def set_filter(self, marca: Optional[str] = None, search: Optional[str] = None):
        """Trocar filtro volta para a primeira página."""
        if marca is not None:
            self.marca = marca or 'TODAS'
        if search is not None:
            self.search = search.strip()
        self.page = 1

    def go_to_page(self, page: int) -> int:
        upper = max(self.total_pages, 1)
        self.page = max(1, min(page, upper))
        return self.page


def has_duplicate_codigo(records: List[Record], marca: str, codigo: str, exclude_id: Any = None) -> bool:
    """Verificação local: já existe outro preço com o mesmo código na mesma marca?"""
    marca_key = (marca or '').strip().upper()
    codigo_key = (codigo or '').strip().upper()
    for record in records:
        if exclude_id is not None and _same_id(record, exclude_id):
            continue
        if (str(record.get('marca') or '').strip().upper() == marca_key
                and str(record.get('codigo') or '').strip().upper() == codigo_key):
            return True
    return False
