# controle_frete/client/sync_loop.py
# Loop de sincronização do cliente: heartbeat (online/offline), atualização periódica
# com trava de execução única e detecção de mudança por fingerprint.

import hashlib
import json
import threading
import time
from enum import Enum
from datetime import date
from typing import Any, Callable, List, Optional

from controle_frete.utils.logger import logger
from .api_client import ApiClient
from .errors import ClientError, SessionExpiredError, TransientNetworkError
from .state import FreteState, PrecoState, Record


class SyncStatus(str, Enum):
    OFFLINE = "OFFLINE"
    ONLINE = "ONLINE"
    SESSION_EXPIRED = "SESSION_EXPIRED"


def fingerprint(payload: Any) -> str:
    """SHA-1 do JSON canônico do payload (chaves ordenadas, sem espaços)."""
    canonical = json.dumps(payload, sort_keys=True, separators=(',', ':'), ensure_ascii=False, default=str)
    return hashlib.sha1(canonical.encode('utf-8')).hexdigest()


class SyncLoop:
    """
    Base do loop de sincronização. Subclasses definem _probe, _fetch e _apply.

    Estados: OFFLINE (inicial), ONLINE e SESSION_EXPIRED (terminal). O heartbeat decide
    online/offline; a atualização só roda ONLINE e chamadas sobrepostas são descartadas.
    O listener on_change só é chamado quando o fingerprint muda (sync_now força).
    """

    name = "sync"

    def __init__(self, heartbeat_interval: float = 15, refresh_interval: float = 10,
                 clock: Callable[[], float] = time.monotonic,
                 on_change: Optional[Callable[[Any], None]] = None,
                 on_status_change: Optional[Callable[[SyncStatus, SyncStatus], None]] = None,
                 on_session_expired: Optional[Callable[[], Any]] = None,
                 notify: Optional[Callable[[str, str], None]] = None):
        self.heartbeat_interval = heartbeat_interval
        self.refresh_interval = refresh_interval
        self.clock = clock
        self.on_change = on_change
        self.on_status_change = on_status_change
        self.on_session_expired = on_session_expired
        self.notify = notify or (lambda kind, message: None)

        self.status = SyncStatus.OFFLINE
        self.last_fingerprint: Optional[str] = None
        self._fetch_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._next_heartbeat: Optional[float] = None
        self._next_refresh: Optional[float] = None

    # --- Hooks ---

    def _probe(self):
        raise NotImplementedError

    def _fetch(self) -> Any:
        raise NotImplementedError

    def _apply(self, payload: Any, digest: str):
        raise NotImplementedError

    def _after_load(self, payload: Any):
        pass

    # --- Transições ---

    def _set_status(self, new_status: SyncStatus):
        old_status = self.status
        if old_status == new_status:
            return
        self.status = new_status
        logger.info(f"[{self.name}] Status: {old_status.value} -> {new_status.value}")
        if self.on_status_change is not None:
            self.on_status_change(old_status, new_status)

    def _expire(self):
        self._set_status(SyncStatus.SESSION_EXPIRED)
        self._stop_event.set()
        if self.on_session_expired is not None:
            self.on_session_expired()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # --- Operações ---

    def heartbeat(self) -> SyncStatus:
        """Sonda o servidor. OFFLINE -> ONLINE dispara recarga completa."""
        if self.status == SyncStatus.SESSION_EXPIRED:
            return self.status
        try:
            self._probe()
        except SessionExpiredError:
            logger.warning(f"[{self.name}] Heartbeat: sessão expirada.")
            self._expire()
            return self.status
        except ClientError as e:
            if self.status != SyncStatus.OFFLINE:
                logger.warning(f"[{self.name}] Heartbeat falhou, servidor offline: {e}")
            self._set_status(SyncStatus.OFFLINE)
            return self.status

        was_offline = self.status == SyncStatus.OFFLINE
        self._set_status(SyncStatus.ONLINE)
        if was_offline:
            logger.info(f"[{self.name}] Servidor online: recarregando dados.")
            self.refresh(force=True)
        return self.status

    def refresh(self, force: bool = False) -> bool:
        """
        Busca os dados e aplica no estado se o fingerprint mudou (ou se force).
        Retorna True se o listener foi notificado. Não roda OFFLINE nem em paralelo.
        """
        if self.status != SyncStatus.ONLINE:
            logger.debug(f"[{self.name}] Atualização ignorada: status {self.status.value}.")
            return False
        if not self._fetch_lock.acquire(blocking=False):
            logger.debug(f"[{self.name}] Atualização já em andamento; chamada descartada.")
            return False
        try:
            try:
                payload = self._fetch()
            except SessionExpiredError:
                logger.warning(f"[{self.name}] Atualização: sessão expirada.")
                self._expire()
                return False
            except TransientNetworkError as e:
                logger.warning(f"[{self.name}] Atualização falhou (rede): {e}. Nova tentativa no próximo ciclo.")
                self._set_status(SyncStatus.OFFLINE)
                return False
            except ClientError as e:
                logger.error(f"[{self.name}] Atualização recusada pelo servidor: {e}")
                self.notify('error', 'Erro ao sincronizar dados')
                return False

            digest = fingerprint(payload)
            if not force and digest == self.last_fingerprint:
                logger.debug(f"[{self.name}] Sem alterações (fingerprint {digest[:8]}).")
                return False

            self.last_fingerprint = digest
            self._apply(payload, digest)
            self._after_load(payload)
            logger.debug(f"[{self.name}] Dados atualizados (fingerprint {digest[:8]}).")
            if self.on_change is not None:
                self.on_change(payload)
            return True
        finally:
            self._fetch_lock.release()

    def sync_now(self) -> bool:
        """Sincronização manual: sempre notifica o listener quando a busca funciona."""
        if self.status != SyncStatus.ONLINE:
            self.notify('error', 'Sistema offline. Não foi possível sincronizar.')
            return False
        synced = self.refresh(force=True)
        if synced:
            self.notify('success', 'Dados sincronizados')
        return synced

    def tick(self, now: Optional[float] = None):
        """Executa o heartbeat e/ou a atualização que estiverem vencidos."""
        now = self.clock() if now is None else now
        if self._next_heartbeat is None:
            self._next_heartbeat = now
            self._next_refresh = now + self.refresh_interval

        if now >= self._next_heartbeat:
            self._next_heartbeat = now + self.heartbeat_interval
            self.heartbeat()

        if self.status == SyncStatus.SESSION_EXPIRED:
            return

        if now >= self._next_refresh:
            self._next_refresh = now + self.refresh_interval
            if self.status == SyncStatus.ONLINE:
                self.refresh()

    def _seconds_until_next(self) -> float:
        now = self.clock()
        due = min(self._next_heartbeat, self._next_refresh)
        return max(0.0, due - now)

    # --- Thread em background ---

    def _run(self):
        logger.info(f"[{self.name}] Loop de sincronização iniciado (heartbeat {self.heartbeat_interval}s, atualização {self.refresh_interval}s).")
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception as e:
                logger.error(f"[{self.name}] Erro não tratado no ciclo de sincronização: {e}", exc_info=True)
            if self._stop_event.wait(timeout=self._seconds_until_next()):
                break
        logger.info(f"[{self.name}] Loop de sincronização finalizado (status {self.status.value}).")

    def start(self):
        if self.is_running:
            logger.warning(f"[{self.name}] Loop já está em execução.")
            return
        self._stop_event.clear()
        self._next_heartbeat = None
        self._next_refresh = None
        self._thread = threading.Thread(target=self._run, name=f"{self.name}-sync", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5):
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)
            if thread.is_alive():
                logger.warning(f"[{self.name}] Thread de sincronização não finalizou em {timeout}s.")
        self._thread = None


class FreteSyncLoop(SyncLoop):
    """Sincroniza a coleção completa de fretes (GET /fretes)."""

    name = "fretes"

    def __init__(self, api: ApiClient, state: FreteState,
                 today: Callable[[], date] = date.today,
                 on_late_alert: Optional[Callable[[List[Record]], None]] = None,
                 **kwargs):
        super().__init__(**kwargs)
        self.api = api
        self.state = state
        self.today = today
        self.on_late_alert = on_late_alert
        self._alert_shown = False

    def _probe(self):
        self.api.list_fretes()

    def _fetch(self) -> List[Record]:
        return self.api.list_fretes()

    def _apply(self, payload: List[Record], digest: str):
        self.state.replace_all(payload, digest)

    def _after_load(self, payload: List[Record]):
        if self._alert_shown:
            return
        self._alert_shown = True
        late = self.state.late()
        if late and self.on_late_alert is not None:
            logger.info(f"[{self.name}] {len(late)} frete(s) fora do prazo.")
            self.on_late_alert(late)


class PrecoSyncLoop(SyncLoop):
    """Sincroniza a página corrente da tabela de preços, mantendo página e filtros."""

    name = "precos"

    def __init__(self, api: ApiClient, state: PrecoState, **kwargs):
        kwargs.setdefault('refresh_interval', 30)
        super().__init__(**kwargs)
        self.api = api
        self.state = state

    def _probe(self):
        self.api.list_precos(page=1, limit=1)

    def _fetch(self):
        return self.api.list_precos(
            page=self.state.page, limit=self.state.page_size,
            marca=self.state.marca, search=self.state.search or None,
        )

    def _apply(self, payload, digest: str):
        self.state.replace_page(payload, digest)
