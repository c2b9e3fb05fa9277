"""Custom errors for the engine model"""

class ProtocolError(Exception):
    """Base error class for protocol errors"""
    pass

class ArithmeticError(ProtocolError):
    """Error for uint256 overflow/underflow or division by zero"""
    pass

class InvalidPriceError(ProtocolError):
    """Error for a zero or negative oracle answer"""

    def __init__(self, feed: str, answer: int):
        super().__init__(f"Invalid price {answer} from feed {feed}")
        self.feed = feed
        self.answer = answer

class InvalidAmountError(ProtocolError):
    """Error for zero amounts or a native payment that does not match"""

    def __init__(self, amount: int, expected: int = None):
        if expected is None:
            message = f"Amount must be more than zero, got {amount}"
        else:
            message = f"Amount {amount} does not match attached value {expected}"
        super().__init__(message)
        self.amount = amount
        self.expected = expected

class InvalidRecipientError(ProtocolError):
    """Error for tokens sent or minted to the zero address"""

    def __init__(self, to: str):
        super().__init__(f"Invalid recipient {to!r}")
        self.to = to

class InvalidCollateralError(ProtocolError):
    """Error for a collateral identity outside the supported set"""

    def __init__(self, collateral: str):
        super().__init__(f"Collateral {collateral} is not supported")
        self.collateral = collateral

class InsufficientBalanceError(ProtocolError):
    """Error for deducting more than a balance holds"""

    def __init__(self, account: str, balance: int, requested: int, kind: str = "balance"):
        super().__init__(
            f"Insufficient {kind} for {account}: have {balance}, need {requested}"
        )
        self.account = account
        self.balance = balance
        self.requested = requested
        self.kind = kind

class InsufficientAllowanceError(ProtocolError):
    """Error for transfer_from beyond the approved amount"""

    def __init__(self, owner: str, spender: str, allowance: int, requested: int):
        super().__init__(
            f"Allowance of {spender} on {owner} is {allowance}, need {requested}"
        )
        self.owner = owner
        self.spender = spender
        self.allowance = allowance
        self.requested = requested

class RedeemAmountTooSmallError(ProtocolError):
    """Error for a debt amount that yields zero collateral"""

    def __init__(self, amount_dsc: int, collateral: str):
        super().__init__(
            f"Repaying {amount_dsc} yields no {collateral} collateral"
        )
        self.amount_dsc = amount_dsc
        self.collateral = collateral

class InsufficientCollateralError(ProtocolError):
    """Error for requested debt above the issuable ceiling"""

    def __init__(self, account: str, requested_debt: int, issuable: int):
        super().__init__(
            f"Requested debt {requested_debt} for {account} exceeds issuable {issuable}"
        )
        self.account = account
        self.requested_debt = requested_debt
        self.issuable = issuable

class HealthFactorTooLowError(ProtocolError):
    """Error for a position left below the minimum health factor"""

    def __init__(self, account: str, health_factor: int):
        super().__init__(f"Health factor of {account} is too low: {health_factor}")
        self.account = account
        self.health_factor = health_factor

class NotLiquidatableError(ProtocolError):
    """Error for liquidating a healthy position"""

    def __init__(self, account: str, health_factor: int):
        super().__init__(f"Position of {account} is healthy: {health_factor}")
        self.account = account
        self.health_factor = health_factor

class TransferFailedError(ProtocolError):
    """Error for a native transfer that did not go through"""

    def __init__(self, to: str, amount: int):
        super().__init__(f"Transfer of {amount} to {to} failed")
        self.to = to
        self.amount = amount

class MintFailedError(ProtocolError):
    """Error for a credit token mint that returned false"""

    def __init__(self, to: str, amount: int):
        super().__init__(f"Mint of {amount} to {to} failed")
        self.to = to
        self.amount = amount

class NotOwnerError(ProtocolError):
    """Error for privileged token calls from anyone but the owner"""

    def __init__(self, caller: str, owner: str):
        super().__init__(f"{caller} is not the owner ({owner})")
        self.caller = caller
        self.owner = owner

class ReentrancyError(ProtocolError):
    """Error for re-entering a guarded engine call"""
    pass
