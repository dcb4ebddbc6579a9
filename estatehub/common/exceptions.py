from fastapi import HTTPException, status


class EstateHubException(HTTPException):
    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(EstateHubException):
    def __init__(self, resource: str, resource_id: str | None = None):
        detail = f"{resource} not found"
        if resource_id:
            detail = f"{resource} '{resource_id}' not found"
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class BadRequestError(EstateHubException):
    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class DuplicateCodeError(BadRequestError):
    def __init__(self, resource: str, code: str):
        super().__init__(f"{resource} code '{code}' already exists")


# ---------- Contract issuance ----------


class InvalidInputError(BadRequestError):
    pass


class DuplicateContractNumberError(BadRequestError):
    def __init__(self, contract_no: str):
        self.contract_no = contract_no
        super().__init__(f"Contract number '{contract_no}' already exists")


class ClientNotFoundError(BadRequestError):
    def __init__(self, client_id: str):
        super().__init__(f"Client '{client_id}' not found")


class UnitNotFoundError(BadRequestError):
    def __init__(self, unit_id: str):
        super().__init__(f"Unit '{unit_id}' not found")


class UnitUnavailableError(BadRequestError):
    def __init__(self, unit_code: str, unit_status: str | None = None):
        detail = f"Unit '{unit_code}' is not available for sale"
        if unit_status:
            detail += f" (status: {unit_status})"
        super().__init__(detail)


class InstallmentsAlreadyGeneratedError(BadRequestError):
    def __init__(self, contract_no: str):
        super().__init__(f"Installments were already generated for contract '{contract_no}'")


class TransactionFailureError(EstateHubException):
    """Raised after a rollback; the client only sees a generic message."""

    def __init__(self, detail: str = "The operation could not be completed"):
        super().__init__(detail=detail, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


class CodeAllocationError(EstateHubException):
    def __init__(self, prefix: str):
        super().__init__(
            detail=f"Could not allocate a new '{prefix}' code",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
