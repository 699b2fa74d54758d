# controle_frete/services/frete_service.py
# Regras de negócio do controle de fretes usando ORM Sessions.

from datetime import date
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError

from controle_frete.database import get_db_session
from controle_frete.database.frete_repository import FreteRepository
from controle_frete.domain.frete import Frete
from controle_frete.domain.enums import StatusFrete
from controle_frete.domain.observacao import (
    Observacao, parse_observacoes, serialize_observacoes, add_observacao, remove_observacao,
)
from controle_frete.services.frete_status import (
    normalize_tipo_nf, is_status_bearing, derive_status_on_update, toggle_status, late_records,
)
from controle_frete.services import frete_views
from controle_frete.utils.data_conversion import (
    parse_optional_date, parse_non_negative_decimal, text_or_sentinel, required_text, parse_year_month,
)
from controle_frete.utils.logger import logger
from controle_frete.api.errors import NotFoundError, ServiceError, ValidationError, DatabaseError

REQUIRED_FIELDS = ('numero_nf', 'nome_orgao', 'data_coleta')
OPTIONAL_TEXT_FIELDS = ('documento', 'contato_orgao', 'vendedor', 'transportadora', 'cidade_destino')


def _tipo_value(tipo) -> str:
    return tipo.value if hasattr(tipo, 'value') else tipo


class FreteService:
    """
    Camada de serviço dos fretes: validação, valores padrão e derivação de status.
    O status gravado sempre respeita tipo_nf e data_entrega.
    """

    def __init__(self, frete_repository: FreteRepository, today: Callable[[], date] = date.today):
        self.frete_repository = frete_repository
        self._today = today
        logger.info("FreteService inicializado (ORM).")

    # --- Validação / normalização ---

    def _parse_date_field(self, data: Dict[str, Any], name: str) -> Optional[date]:
        try:
            return parse_optional_date(data.get(name))
        except ValueError as e:
            raise ValidationError(f"Campo '{name}' inválido: {e}") from e

    def _parse_money_field(self, data: Dict[str, Any], name: str):
        try:
            return parse_non_negative_decimal(data.get(name))
        except ValueError as e:
            raise ValidationError(f"Campo '{name}' inválido: {e}") from e

    def _parse_observacoes(self, value: Any) -> str:
        try:
            return serialize_observacoes(parse_observacoes(value))
        except ValueError as e:
            raise ValidationError(f"Campo 'observacoes' inválido: {e}") from e

    def _build_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Valida o corpo de criação/atualização completa e devolve os valores das colunas."""
        if not isinstance(data, dict):
            raise ValidationError("Corpo da requisição deve ser um objeto JSON.")

        missing = [name for name in REQUIRED_FIELDS if not required_text(data.get(name))]
        if missing:
            raise ValidationError(f"Campos obrigatórios faltando: {', '.join(REQUIRED_FIELDS)}")

        tipo = normalize_tipo_nf(data.get('tipo_nf'))
        data_entrega = self._parse_date_field(data, 'data_entrega')
        status = derive_status_on_update(tipo, data_entrega)

        values = {
            'numero_nf': required_text(data.get('numero_nf')),
            'nome_orgao': required_text(data.get('nome_orgao')),
            'data_coleta': self._parse_date_field(data, 'data_coleta'),
            'data_emissao': self._parse_date_field(data, 'data_emissao') or self._today(),
            'valor_nf': self._parse_money_field(data, 'valor_nf'),
            'valor_frete': self._parse_money_field(data, 'valor_frete'),
            'tipo_nf': _tipo_value(tipo),
            'previsao_entrega': self._parse_date_field(data, 'previsao_entrega'),
            'data_entrega': data_entrega,
            'status': status.value if status else None,
        }
        for name in OPTIONAL_TEXT_FIELDS:
            values[name] = text_or_sentinel(data.get(name))
        return values

    # --- Consultas ---

    def list_fretes(self) -> List[Frete]:
        logger.debug("Buscando todos os fretes.")
        try:
            with get_db_session() as db:
                fretes = self.frete_repository.list_all(db)
            logger.debug(f"{len(fretes)} fretes encontrados.")
            return fretes
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao buscar fretes: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível buscar os fretes: {e}") from e

    def get_frete(self, frete_id: int) -> Frete:
        try:
            with get_db_session() as db:
                frete = self.frete_repository.find_by_id(db, frete_id)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao buscar frete ID {frete_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível buscar o frete: {e}") from e
        if frete is None:
            raise NotFoundError("Frete não encontrado")
        return frete

    # --- Escrita ---

    def create_frete(self, data: Dict[str, Any]) -> Frete:
        """
        Cria um frete. Campos obrigatórios: numero_nf, nome_orgao, data_coleta.

        Raises:
            ValidationError: Campos faltando ou valores inválidos.
            ServiceError: Falha no banco de dados.
        """
        values = self._build_values(data)
        values['observacoes'] = self._parse_observacoes(data.get('observacoes'))

        logger.info(f"Criando frete NF {values['numero_nf']} (tipo {values['tipo_nf']}, status {values['status']}).")
        try:
            with get_db_session() as db:
                frete = self.frete_repository.insert(db, Frete(**values))
            logger.info(f"Frete criado: ID {frete.id}.")
            return frete
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao criar frete NF {values['numero_nf']}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível criar o frete: {e}") from e

    def update_frete(self, frete_id: int, data: Dict[str, Any]) -> Frete:
        """
        Atualização completa. O status é recalculado a partir de tipo_nf e data_entrega
        (tipo ausente = ENVIO; data_entrega ausente = sem entrega). Se 'observacoes' não
        vier no corpo, as observações atuais são mantidas.
        """
        values = self._build_values(data)
        if 'observacoes' in data:
            values['observacoes'] = self._parse_observacoes(data.get('observacoes'))

        logger.info(f"Atualizando frete ID {frete_id}: tipo {values['tipo_nf']}, status {values['status']}.")
        try:
            with get_db_session() as db:
                frete = self.frete_repository.update_by_id(db, frete_id, values)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao atualizar frete ID {frete_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível atualizar o frete: {e}") from e
        if frete is None:
            raise NotFoundError("Frete não encontrado")
        return frete

    def patch_status(self, frete_id: int, data: Optional[Dict[str, Any]]) -> Frete:
        """
        Alteração rápida de status (checkbox).

        Com 'status' no corpo, aplica o status pedido: EM_TRANSITO limpa data_entrega;
        ENTREGUE usa a data_entrega enviada, a existente ou a de hoje. Sem 'status',
        o servidor alterna o status atual.
        """
        data = data or {}
        try:
            requested = StatusFrete.parse(data.get('status'))
        except ValueError as e:
            raise ValidationError(str(e)) from e
        data_entrega = self._parse_date_field(data, 'data_entrega')

        try:
            with get_db_session() as db:
                frete = self.frete_repository.find_by_id(db, frete_id)
                if frete is None:
                    raise NotFoundError("Frete não encontrado")
                if not is_status_bearing(frete.tipo_nf):
                    raise ValidationError(f"Tipo de NF '{frete.tipo_nf}' não possui status de entrega.")

                if requested is None:
                    new_status, new_entrega = toggle_status(frete.status, frete.data_entrega, self._today())
                elif requested == StatusFrete.EM_TRANSITO:
                    new_status, new_entrega = StatusFrete.EM_TRANSITO, None
                else:
                    new_status, new_entrega = StatusFrete.ENTREGUE, data_entrega or frete.data_entrega or self._today()

                logger.info(f"Status do frete ID {frete_id}: {frete.status} -> {new_status.value} (entrega {new_entrega}).")
                frete = self.frete_repository.update_by_id(
                    db, frete_id, {'status': new_status.value, 'data_entrega': new_entrega}
                )
            return frete
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao atualizar status do frete ID {frete_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível atualizar o status: {e}") from e

    def delete_frete(self, frete_id: int) -> None:
        logger.info(f"Excluindo frete ID {frete_id}.")
        try:
            with get_db_session() as db:
                deleted = self.frete_repository.delete_by_id(db, frete_id)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao excluir frete ID {frete_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível excluir o frete: {e}") from e
        if not deleted:
            raise NotFoundError("Frete não encontrado")

    # --- Observações ---

    def _stored_observacoes(self, frete: Frete) -> List[Observacao]:
        """Lista gravada, lida por inteiro. Se alguma entrada estiver ilegível, nada é regravado."""
        try:
            return parse_observacoes(frete.observacoes)
        except ValueError as e:
            logger.error(f"Observações do frete ID {frete.id} ilegíveis; alteração recusada: {e}")
            raise ServiceError(f"Observações gravadas do frete {frete.id} estão ilegíveis: {e}") from e

    def add_observacao(self, frete_id: int, texto: str, username: Optional[str] = None) -> Frete:
        """Acrescenta uma observação ao final da lista (autor padrão: 'Usuário')."""
        try:
            with get_db_session() as db:
                frete = self.frete_repository.find_by_id(db, frete_id)
                if frete is None:
                    raise NotFoundError("Frete não encontrado")
                try:
                    observacoes = add_observacao(self._stored_observacoes(frete), texto, username)
                except ValueError as e:
                    raise ValidationError(str(e)) from e
                frete = self.frete_repository.update_by_id(
                    db, frete_id, {'observacoes': serialize_observacoes(observacoes)}
                )
            logger.info(f"Observação adicionada ao frete ID {frete_id} por '{username or 'Usuário'}'.")
            return frete
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao adicionar observação ao frete ID {frete_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível adicionar a observação: {e}") from e

    def remove_observacao(self, frete_id: int, index: int) -> Frete:
        try:
            with get_db_session() as db:
                frete = self.frete_repository.find_by_id(db, frete_id)
                if frete is None:
                    raise NotFoundError("Frete não encontrado")
                try:
                    observacoes = remove_observacao(self._stored_observacoes(frete), index)
                except IndexError as e:
                    raise NotFoundError(f"Observação {index} não encontrada") from e
                frete = self.frete_repository.update_by_id(
                    db, frete_id, {'observacoes': serialize_observacoes(observacoes)}
                )
            logger.info(f"Observação {index} removida do frete ID {frete_id}.")
            return frete
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Falha ao remover observação do frete ID {frete_id}: {e}", exc_info=True)
            raise ServiceError(f"Não foi possível remover a observação: {e}") from e

    # --- Visões ---

    def list_atrasados(self) -> List[Frete]:
        return late_records(self.list_fretes(), self._today())

    def get_dashboard(self, mes: Optional[str] = None) -> Dict[str, Any]:
        try:
            month = parse_year_month(mes)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        today = self._today()
        return frete_views.dashboard(self.list_fretes(), month or frete_views.month_start(today), today)

    def get_grafico(self, ano: Optional[str] = None) -> Dict[str, Any]:
        if ano in (None, ''):
            year = self._today().year
        else:
            try:
                year = int(ano)
            except (TypeError, ValueError) as e:
                raise ValidationError(f"Ano inválido: '{ano}'") from e
            if not 1900 <= year <= 9999:
                raise ValidationError(f"Ano inválido: '{ano}'")
        return frete_views.monthly_totals(self.list_fretes(), year)

    def get_filter_options(self) -> Dict[str, List[str]]:
        return frete_views.filter_options(self.list_fretes(), self._today())
