"""
Financial Goal Service.

Goals are owned by one user. An active goal is in progress; reaching the
target amount (or marking it completed) deactivates it.

Usage:
    from finance_api.services.domain import FinancialGoalService

    with tenant_scope(user_id):
        service = FinancialGoalService(db)
        goal = service.create(FinancialGoalDTO(name="Trip", goal_type=GoalType.SAVINGS, target_amount=Decimal("1000")))
        service.update_progress(goal.id, Decimal("250"))
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from sqlalchemy.orm import Session

from finance_api.models import FinancialGoal, TransactionSource
from finance_api.schemas import FinancialGoalDTO
from finance_api.services.base_service import EntityService
from finance_api.services.crud.specification import FieldEquals, Specification
from finance_api.services.domain.user_owned import UserOwnedModule
from shared.config.constants import FilterKeys, GoalType
from shared.config.logging import get_logger
from shared.utils.exceptions import NotFoundError, OwnershipDeniedError, ValidationError
from shared.utils.validators import validate_id, validate_required_string

logger = get_logger(__name__)

GOAL_TYPE_FILTER = "goal_type"
ACCOUNT_ID_FILTER = "account_id"


class FinancialGoalModule(UserOwnedModule[FinancialGoal, FinancialGoalDTO]):
    display_name = "FinancialGoal"
    model = FinancialGoal
    dto_schema = FinancialGoalDTO

    def validate_create(self, dto: FinancialGoalDTO) -> None:
        validate_required_string(dto.name, "Name")
        if dto.goal_type is None:
            raise ValidationError("Goal type is required", field=GOAL_TYPE_FILTER)
        if dto.target_amount is None:
            raise ValidationError("Target amount is required", field="target_amount")

    def validate_update(self, dto: FinancialGoalDTO) -> None:
        if dto.name is not None:
            validate_required_string(dto.name, "Name")

    def _find_account(self, account_id: int) -> TransactionSource:
        validate_id(account_id, "Account ID")
        account = self.session.get(TransactionSource, account_id)
        if account is None:
            raise NotFoundError("TransactionSource", account_id)
        return account

    def _check_account_owner(self, account: Optional[TransactionSource], owner_id: Optional[int]) -> None:
        # A goal may only track an account of its own owner
        if account is not None and account.user_id != owner_id:
            raise OwnershipDeniedError("TransactionSource", entity_id=account.id)

    def to_entity(self, dto: FinancialGoalDTO) -> FinancialGoal:
        goal = FinancialGoal(
            name=dto.name,
            description=dto.description,
            goal_type=dto.goal_type,
            target_amount=dto.target_amount,
            current_amount=dto.current_amount if dto.current_amount is not None else Decimal("0"),
            deadline=dto.deadline,
            auto_calculate=bool(dto.auto_calculate),
            is_active=True,
        )
        if dto.account_id is not None:
            goal.account = self._find_account(dto.account_id)
        return goal

    def apply_dto(self, entity: FinancialGoal, dto: FinancialGoalDTO) -> None:
        """Partial update: None fields keep their current value."""
        account = None
        if dto.account_id is not None:
            account = self._find_account(dto.account_id)
            self._check_account_owner(account, entity.user_id)

        if dto.name is not None:
            entity.name = dto.name
        if dto.description is not None:
            entity.description = dto.description
        if dto.goal_type is not None:
            entity.goal_type = dto.goal_type
        if dto.target_amount is not None:
            entity.target_amount = dto.target_amount
        if dto.current_amount is not None:
            entity.current_amount = dto.current_amount
        if dto.deadline is not None:
            entity.deadline = dto.deadline
        if dto.auto_calculate is not None:
            entity.auto_calculate = dto.auto_calculate
        if dto.is_active is not None:
            entity.is_active = dto.is_active
        if account is not None:
            entity.account = account

    def validate_entity(self, entity: FinancialGoal) -> None:
        self._check_account_owner(entity.account, entity.user_id)

    def filter_specification(self, key: str, value: Any) -> Optional[Specification]:
        if key == GOAL_TYPE_FILTER:
            try:
                goal_type = GoalType(value)
            except ValueError:
                raise ValidationError(
                    f"Invalid goal type: {value}", field=GOAL_TYPE_FILTER, value=value
                ) from None
            return FieldEquals(FinancialGoal.goal_type, goal_type)
        if key == ACCOUNT_ID_FILTER:
            return FieldEquals(FinancialGoal.account_id, value)
        return None


class FinancialGoalService(EntityService[FinancialGoal, int, FinancialGoalDTO]):
    """
    Service for financial goals.

    Business rules:
    - Goals belong to the current user
    - Name, goal type and a positive target amount are required on create
    - Updates are partial
    - Progress that reaches the target completes (deactivates) the goal
    """

    def __init__(self, db: Session, **kwargs):
        super().__init__(db, FinancialGoalModule(db), **kwargs)

    # =========================================================================
    # Query Methods
    # =========================================================================

    def find_active_goals(self) -> list[FinancialGoalDTO]:
        """Goals in progress, nearest deadline first."""
        return self.list_all(
            filters={FilterKeys.IS_ACTIVE: True},
            sort_by="deadline",
            sort_direction="asc",
        )

    def find_completed_goals(self) -> list[FinancialGoalDTO]:
        """Completed goals, most recently updated first."""
        return self.list_all(
            filters={FilterKeys.IS_ACTIVE: False},
            sort_by="updated_at",
            sort_direction="desc",
        )

    # =========================================================================
    # Command Methods
    # =========================================================================

    def update_progress(self, goal_id: int, amount: Decimal | int | float | str) -> FinancialGoalDTO:
        """
        Add `amount` to the goal's current amount.

        Floats are converted through their decimal string form (0.1 adds
        exactly 0.1). The goal is deactivated once the target is reached.
        """
        if amount is None:
            raise ValidationError("Amount is required", field="amount")

        try:
            delta = Decimal(str(amount))
        except InvalidOperation:
            raise ValidationError("Invalid amount", field="amount", value=amount) from None

        goal = self.get_entity_by_id(goal_id)
        goal.current_amount = (goal.current_amount or Decimal("0")) + delta
        if goal.is_completed:
            goal.is_active = False
            logger.info("Goal completed", goal_id=goal_id)

        self._persist(goal, "update")
        return self.to_dto(goal)

    def mark_as_completed(self, goal_id: int) -> FinancialGoalDTO:
        return self._set_active(goal_id, False)

    def reactivate(self, goal_id: int) -> FinancialGoalDTO:
        return self._set_active(goal_id, True)

    def _set_active(self, goal_id: int, active: bool) -> FinancialGoalDTO:
        goal = self.get_entity_by_id(goal_id)
        goal.is_active = active
        self._persist(goal, "update")
        return self.to_dto(goal)
