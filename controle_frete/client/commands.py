# controle_frete/client/commands.py
# Mutações otimistas: aplicam no estado local, chamam a API e confirmam ou desfazem.

import itertools
from datetime import date
from typing import Any, Callable, Dict, Optional

from controle_frete.domain.enums import StatusFrete
from controle_frete.services.frete_status import (
    derive_status_on_create, derive_status_on_update, is_status_bearing, normalize_tipo_nf, toggle_status,
)
from controle_frete.utils.logger import logger
from .errors import ClientError, SessionExpiredError
from .state import FreteState, PrecoState, Record, _RecordList, has_duplicate_codigo

Notifier = Callable[[str, str], None]

# IDs provisórios negativos até o servidor devolver o registro criado
_provisional_ids = itertools.count(-1, -1)


class Command:
    def is_applicable(self) -> bool:
        return True

    def validation_error(self) -> Optional[str]:
        """Mensagem quando o comando é recusado antes de tocar o estado local."""
        return None

    def apply(self):
        raise NotImplementedError

    def confirm(self, server_record: Any):
        pass

    def rollback(self):
        raise NotImplementedError

    def success_message(self, server_record: Any) -> Optional[str]:
        return None

    error_message = "Erro ao processar a operação"


class _CreateRecord(Command):
    """Registro provisório (id negativo) trocado pelo do servidor na mesma posição."""

    def __init__(self, state: _RecordList, data: Dict[str, Any]):
        self.state = state
        self.data = dict(data)
        self.provisional_id = next(_provisional_ids)

    def provisional_record(self) -> Record:
        raise NotImplementedError

    def apply(self):
        self.state.upsert({**self.provisional_record(), 'id': self.provisional_id})

    def confirm(self, server_record: Record):
        index = self.state.index_of(self.provisional_id)
        self.state.remove(self.provisional_id)
        self.state.upsert(server_record, position=index if index >= 0 else None)

    def rollback(self):
        self.state.remove(self.provisional_id)


class _DeleteRecord(Command):
    def __init__(self, state: _RecordList, record_id: Any):
        self.state = state
        self.record_id = record_id
        self.removed: Optional[tuple] = None

    def apply(self):
        self.removed = self.state.remove(self.record_id)

    def rollback(self):
        if self.removed is not None:
            index, record = self.removed
            self.state.insert_at(index, record)


class CreateFrete(_CreateRecord):
    error_message = "Erro ao registrar frete"

    def provisional_record(self) -> Record:
        tipo = normalize_tipo_nf(self.data.get('tipo_nf'))
        status = derive_status_on_create(tipo)
        return {
            **self.data,
            'tipo_nf': tipo.value if hasattr(tipo, 'value') else tipo,
            'status': status.value if status else None,
        }

    def success_message(self, server_record: Record) -> str:
        return f"NF {self.data.get('numero_nf') or server_record.get('numero_nf')} Registrado"


class UpdateFrete(Command):
    error_message = "Erro ao atualizar frete"

    def __init__(self, state: FreteState, frete_id: Any, data: Dict[str, Any]):
        self.state = state
        self.frete_id = frete_id
        self.data = dict(data)
        self.previous: Optional[Record] = None

    def apply(self):
        self.previous = self.state.find(self.frete_id)
        if self.previous is None:
            return
        record = {**self.previous, **self.data, 'id': self.previous['id']}
        status = derive_status_on_update(record.get('tipo_nf'), record.get('data_entrega'))
        record['status'] = status.value if status else None
        self.state.upsert(record)

    def confirm(self, server_record: Record):
        self.state.upsert(server_record)

    def rollback(self):
        if self.previous is not None:
            self.state.upsert(self.previous)

    def success_message(self, server_record: Record) -> str:
        return f"NF {self.data.get('numero_nf') or server_record.get('numero_nf')} Atualizado"


class DeleteFrete(_DeleteRecord):
    error_message = "Erro ao excluir no servidor"

    def success_message(self, server_record: Any) -> str:
        numero = self.removed[1].get('numero_nf') if self.removed else None
        return f"NF {numero or 'sem número'} Excluído"


class ToggleStatus(Command):
    """Checkbox de entrega. Tipos sem status não exibem o controle: o comando é ignorado."""
    error_message = "Erro ao atualizar status"

    def __init__(self, state: FreteState, frete_id: Any, today: Callable[[], date] = date.today):
        self.state = state
        self.frete_id = frete_id
        self._today = today
        self.previous: Optional[Record] = None
        self.new_status: Optional[StatusFrete] = None
        self.new_data_entrega: Optional[str] = None

    def is_applicable(self) -> bool:
        current = self.state.find(self.frete_id)
        return current is not None and is_status_bearing(current.get('tipo_nf'))

    def apply(self):
        # Alterna a partir do registro atual, não do que existia quando o comando foi criado
        self.previous = self.state.find(self.frete_id)
        if self.previous is None:
            return
        new_status, new_entrega = toggle_status(
            self.previous.get('status'), self.previous.get('data_entrega'), self._today()
        )
        self.new_status = new_status
        self.new_data_entrega = new_entrega.isoformat() if new_entrega else None
        self.state.upsert({**self.previous, 'status': new_status.value, 'data_entrega': self.new_data_entrega})

    def confirm(self, server_record: Record):
        self.state.upsert(server_record)

    def rollback(self):
        if self.previous is not None:
            self.state.upsert(self.previous)

    def success_message(self, server_record: Record) -> str:
        numero = server_record.get('numero_nf') or (self.previous or {}).get('numero_nf')
        if self.new_status == StatusFrete.ENTREGUE:
            return f"NF {numero} Entregue"
        return f"NF {numero} desmarcado - voltou ao monitoramento"


def _codigo_em_uso(state: PrecoState, data: Dict[str, Any], exclude_id: Any = None) -> Optional[str]:
    marca = str(data.get('marca') or '').strip()
    codigo = str(data.get('codigo') or '').strip()
    if marca and codigo and has_duplicate_codigo(state.snapshot(), marca, codigo, exclude_id):
        return f"Código {codigo} já cadastrado para a marca {marca}"
    return None


def _preco_fields(data: Dict[str, Any]) -> Record:
    record = dict(data)
    for name in ('marca', 'codigo'):
        if record.get(name) is not None:
            record[name] = str(record[name]).strip()
    if record.get('descricao') is not None:
        record['descricao'] = str(record['descricao']).strip().upper()
    return record


class CreatePreco(_CreateRecord):
    """Novo preço. Código repetido na mesma marca (na página carregada) é recusado localmente."""
    error_message = "Erro ao cadastrar preço"

    def validation_error(self) -> Optional[str]:
        return _codigo_em_uso(self.state, self.data)

    def provisional_record(self) -> Record:
        return _preco_fields(self.data)

    def success_message(self, server_record: Record) -> str:
        return f"Preço {server_record.get('codigo') or self.data.get('codigo')} cadastrado"


class UpdatePreco(Command):
    error_message = "Erro ao atualizar preço"

    def __init__(self, state: PrecoState, preco_id: Any, data: Dict[str, Any]):
        self.state = state
        self.preco_id = preco_id
        self.data = dict(data)
        self.previous: Optional[Record] = None

    def validation_error(self) -> Optional[str]:
        current = self.state.find(self.preco_id) or {}
        return _codigo_em_uso(self.state, {**current, **self.data}, exclude_id=self.preco_id)

    def apply(self):
        self.previous = self.state.find(self.preco_id)
        if self.previous is None:
            return
        self.state.upsert({**self.previous, **_preco_fields(self.data), 'id': self.previous['id']})

    def confirm(self, server_record: Record):
        self.state.upsert(server_record)

    def rollback(self):
        if self.previous is not None:
            self.state.upsert(self.previous)

    def success_message(self, server_record: Record) -> str:
        return f"Preço {server_record.get('codigo') or self.data.get('codigo')} atualizado"


class DeletePreco(_DeleteRecord):
    error_message = "Erro ao excluir preço"

    def success_message(self, server_record: Any) -> str:
        codigo = self.removed[1].get('codigo') if self.removed else None
        return f"Preço {codigo} excluído" if codigo else "Preço excluído"


class CommandRunner:
    """
    Executa comandos otimistas. Falhas nunca propagam: o estado é restaurado e o
    notificador recebe ('error', mensagem). Sessão expirada também avisa o portão de sessão.
    """

    def __init__(self, notify: Optional[Notifier] = None, on_session_expired: Optional[Callable[[], Any]] = None):
        self.notify = notify or (lambda kind, message: None)
        self.on_session_expired = on_session_expired

    def execute(self, command: Command, call: Callable[[Command], Any]) -> bool:
        if not command.is_applicable():
            logger.debug(f"{type(command).__name__} ignorado: não aplicável ao registro.")
            return False

        refusal = command.validation_error()
        if refusal:
            logger.info(f"{type(command).__name__} recusado: {refusal}")
            self.notify('error', refusal)
            return False

        command.apply()
        try:
            server_record = call(command)
        except SessionExpiredError as e:
            logger.warning(f"{type(command).__name__}: sessão expirada ({e}). Desfazendo alteração local.")
            command.rollback()
            self.notify('error', e.message)
            if self.on_session_expired is not None:
                self.on_session_expired()
            return False
        except ClientError as e:
            logger.error(f"{type(command).__name__} falhou: {e}. Desfazendo alteração local.")
            command.rollback()
            self.notify('error', command.error_message)
            return False
        except Exception as e:
            logger.error(f"{type(command).__name__} falhou inesperadamente: {e}", exc_info=True)
            command.rollback()
            self.notify('error', command.error_message)
            return False

        command.confirm(server_record)
        message = command.success_message(server_record)
        if message:
            kind = 'info' if isinstance(command, ToggleStatus) and command.new_status == StatusFrete.EM_TRANSITO else 'success'
            self.notify(kind, message)
        return True
