# run_monitor.py
# Monitor de fretes no terminal: autentica pelo portal e mantém o loop de sincronização rodando.
# Uso: python run_monitor.py <sessionToken>
import sys
import threading

from controle_frete.client import (
    ApiClient, SessionGate, Authenticated, FreteState, FreteSyncLoop, SyncStatus,
)
from controle_frete.config.settings import load_config
from controle_frete.services.session_service import PortalSessionService
from controle_frete.utils.logger import logger

config = load_config()


def _print_dashboard(state: FreteState):
    painel = state.dashboard()
    logger.info(
        f"{painel['mes_nome']}: {painel['entregues']} entregues, {painel['em_transito']} em trânsito, "
        f"{painel['fora_do_prazo']} fora do prazo | NF R$ {painel['valor_total']:.2f} | frete R$ {painel['frete_total']:.2f}"
    )


def main(argv) -> int:
    query = {'sessionToken': argv[1]} if len(argv) > 1 else {}
    portal = PortalSessionService(config.PORTAL_URL, timeout=config.PORTAL_TIMEOUT)
    gate = SessionGate(config.PORTAL_URL, verifier=portal.verify)

    result = gate.authenticate(query)
    if not isinstance(result, Authenticated):
        logger.error(f"{result.message}. Acesse pelo portal: {result.portal_url}")
        return 1

    state = FreteState()
    finished = threading.Event()

    def on_status_change(old: SyncStatus, new: SyncStatus):
        if new == SyncStatus.SESSION_EXPIRED:
            denied = gate.expire()
            logger.error(f"{denied.message}. Acesse pelo portal: {denied.portal_url}")
            finished.set()

    loop = FreteSyncLoop(
        ApiClient(config.API_URL, result.token, timeout=config.REQUEST_TIMEOUT),
        state,
        heartbeat_interval=config.HEARTBEAT_INTERVAL,
        refresh_interval=config.FRETES_REFRESH_INTERVAL,
        on_change=lambda payload: _print_dashboard(state),
        on_status_change=on_status_change,
        on_late_alert=lambda late: logger.warning(
            "Fretes fora do prazo: " + ", ".join(f"NF {f.get('numero_nf')} ({f.get('previsao_entrega')})" for f in late)
        ),
        notify=lambda kind, message: logger.info(f"[{kind}] {message}"),
    )
    loop.start()
    try:
        finished.wait()
    except KeyboardInterrupt:
        logger.info("Monitor interrompido pelo usuário.")
    finally:
        loop.stop()
    return 0 if loop.status != SyncStatus.SESSION_EXPIRED else 1


if __name__ == '__main__':
    sys.exit(main(sys.argv))
