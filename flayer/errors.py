"""Error classes for the Flayer core.

Every guard violation raised by the fee and shutdown engines is one of five
kinds. Callers can catch the kind (e.g. StateError) or the named condition
(e.g. ShutdownNotReachedQuorum). None of them are retried automatically and
all of them abort the enclosing transaction.
"""


class FlayerError(Exception):
    """Base error for Flayer operations."""

    pass


class AuthorizationError(FlayerError):
    """Caller lacks the required role or ownership."""

    pass


class StateError(FlayerError):
    """Operation is invalid in the current lifecycle state."""

    pass


class ValidationError(FlayerError):
    """Malformed or out-of-range input."""

    pass


class ConservationError(FlayerError):
    """Insufficient balance, allowance or inventory."""

    pass


class ExternalCallError(FlayerError):
    """A collaborator call failed or returned an unexpected result."""

    pass


# --- Authorization ---


class NotOwner(AuthorizationError):
    pass


# --- State ---


class Paused(StateError):
    """Protocol is paused; state-mutating entry points are blocked."""

    pass


class ReentrantCall(StateError):
    """A guarded entry point was entered while another guarded call is in flight."""

    pass


class PoolNotInitialized(StateError):
    pass


class NoBeneficiaryExemption(StateError):
    pass


class UnknownCollection(StateError):
    pass


class ShutdownPrevented(StateError):
    pass


class ShutdownProcessAlreadyStarted(StateError):
    pass


class ShutdownProcessNotStarted(StateError):
    pass


class ShutdownNotReachedQuorum(StateError):
    pass


class ShutdownQuorumHasPassed(StateError):
    pass


class ShutdownExecuted(StateError):
    pass


class ShutdownNotExecuted(StateError):
    pass


class NotAllTokensSold(StateError):
    pass


class InsufficientTotalSupplyToCancel(StateError):
    pass


class ListingsExist(StateError):
    pass


class NoVotesPlacedYet(StateError):
    pass


# --- Validation ---


class FeeTooHigh(ValidationError):
    pass


class InvalidRoyalty(ValidationError):
    pass


class InvalidDonateThresholds(ValidationError):
    pass


class ZeroAmount(ValidationError):
    pass


class InvalidSwap(ValidationError):
    pass


class TooManyItems(ValidationError):
    pass


class NoNFTsSupplied(ValidationError):
    pass


class TokenIsListed(ValidationError):
    pass


# --- Conservation ---


class InsufficientBalance(ConservationError):
    pass


class InsufficientAllowance(ConservationError):
    pass


class InsufficientInventory(ConservationError):
    pass


class UserHoldsNoTokens(ConservationError):
    pass


class NoTokensAvailableToClaim(ConservationError):
    pass


class NothingToClaim(ConservationError):
    pass


# --- External ---


class SettlementMismatch(ExternalCallError):
    """Market deltas do not reconcile with the requested residual trade."""

    pass
