"""
Tab accumulator.

The kiosk adds or removes one coffee at a time. The unit price is read
when the button is pressed, so a price change applies from the next coffee
on and never rewrites what is already on a tab.
"""

import logging

from django.db import transaction
from django.utils import timezone

from apps.configuration.services import SettingsPricingProvider
from apps.ledger.models import AuditAction, Actor, Member
from .audit import record_audit
from .exceptions import InvalidAmountError
from .locking import lock_member, storage_errors
from .money import ZERO, check_ledger_value, round2, to_decimal

logger = logging.getLogger(__name__)


def _unit_price(pricing):
    price = round2((pricing or SettingsPricingProvider()).get_unit_price())
    if price < 0:
        raise InvalidAmountError("Coffee price must not be negative")
    return price


def increment_tab(member_id, *, pricing=None, clock=None) -> Member:
    """
    Add the price of one coffee to the member's tab.

    Raises:
        MemberNotFoundError: If the member is missing or soft-deleted
        StorageFailureError: If the write fails
    """
    clock = clock or timezone.now
    price = _unit_price(pricing)

    with storage_errors('add to tab', member_id):
        with transaction.atomic():
            member = lock_member(member_id)
            old_tab = member.current_tab
            member.current_tab = check_ledger_value(round2(old_tab + price), "Tab")
            member.save(update_fields=['current_tab', 'updated_at'])
            record_audit(
                member=member,
                action=AuditAction.INCREMENT,
                old_value=old_tab,
                new_value=member.current_tab,
                amount=price,
                at=clock(),
            )

    logger.info("Tab incremented: member=%s %s -> %s", member.id, old_tab, member.current_tab)
    return member


def decrement_tab(member_id, *, pricing=None, clock=None) -> Member:
    """
    Remove the price of one coffee from the member's tab, never below zero.

    An empty tab is left as it is and no audit row is written.

    Raises:
        MemberNotFoundError: If the member is missing or soft-deleted
        StorageFailureError: If the write fails
    """
    clock = clock or timezone.now
    price = _unit_price(pricing)

    with storage_errors('subtract from tab', member_id):
        with transaction.atomic():
            member = lock_member(member_id)
            old_tab = member.current_tab
            if old_tab <= 0:
                return member

            deducted = min(price, old_tab)
            member.current_tab = round2(old_tab - deducted)
            member.save(update_fields=['current_tab', 'updated_at'])
            record_audit(
                member=member,
                action=AuditAction.DECREMENT,
                old_value=old_tab,
                new_value=member.current_tab,
                amount=-deducted,
                at=clock(),
            )

    logger.info("Tab decremented: member=%s %s -> %s", member.id, old_tab, member.current_tab)
    return member


def set_current_tab(member_id, amount, *, clock=None) -> Member:
    """
    Admin override of a member's tab. Negative values are clamped to zero.

    Raises:
        InvalidAmountError: If amount is not a number
        MemberNotFoundError: If the member is missing or soft-deleted
    """
    clock = clock or timezone.now
    new_tab = check_ledger_value(max(ZERO, round2(to_decimal(amount))), "Tab")

    with storage_errors('update tab', member_id):
        with transaction.atomic():
            member = lock_member(member_id)
            old_tab = member.current_tab
            if new_tab == old_tab:
                return member

            member.current_tab = new_tab
            member.save(update_fields=['current_tab', 'updated_at'])
            record_audit(
                member=member,
                action=AuditAction.INCREMENT if new_tab > old_tab else AuditAction.DECREMENT,
                old_value=old_tab,
                new_value=new_tab,
                amount=round2(new_tab - old_tab),
                performed_by=Actor.ADMIN,
                at=clock(),
            )

    logger.info("Tab set by admin: member=%s %s -> %s", member.id, old_tab, new_tab)
    return member
