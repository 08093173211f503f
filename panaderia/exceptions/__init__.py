"""Custom exceptions for the settlement engine."""


class PanaderiaError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['error'] = type(self).__name__
        rv['status'] = 'error'
        return rv


class BusinessLogicError(PanaderiaError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)


class NotFoundError(PanaderiaError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)


class CorruptRecordError(PanaderiaError):
    """A stored row could not be mapped into its record type."""
    def __init__(self, entity, entity_id, detail):
        message = f'Registro corrupto en {entity} #{entity_id}: {detail}'
        super().__init__(message, 500, {'entity': entity, 'entity_id': entity_id})


# =====================================================
# MONEY AND CURRENCY
# =====================================================

class InvalidAmountError(BusinessLogicError):
    """Raised when a monetary value is not a finite number."""
    def __init__(self, value):
        super().__init__(f'El valor monetario debe ser un número finito: {value!r}')


class InvalidExchangeRateError(BusinessLogicError):
    def __init__(self, rate):
        super().__init__(f'La tasa de cambio debe ser mayor a cero (recibida: {rate})')


class InvalidPaymentAmountError(BusinessLogicError):
    def __init__(self, currency, amount):
        super().__init__(f'Los pagos deben tener montos positivos ({currency} {amount})')


class InvalidCurrencyError(BusinessLogicError):
    def __init__(self, currency, accepted):
        accepted_str = ', '.join(accepted)
        super().__init__(f'Moneda no soportada: {currency!r}. Monedas aceptadas: {accepted_str}')


class InvalidDiscountError(BusinessLogicError):
    def __init__(self, discount):
        super().__init__(f'El descuento debe ser un entero no negativo en centavos (recibido: {discount!r})')


# =====================================================
# INVENTORY AND PRICING
# =====================================================

class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id):
        super().__init__(f'Producto {product_id} no encontrado', {'product_id': product_id})


class RawMaterialNotFoundError(NotFoundError):
    def __init__(self, raw_material_id):
        super().__init__(f'Insumo {raw_material_id} no encontrado', {'raw_material_id': raw_material_id})


class MissingPriceError(BusinessLogicError):
    def __init__(self, product_name):
        super().__init__(f'El producto {product_name} no tiene precio definido')


class InvalidQuantityError(BusinessLogicError):
    def __init__(self, qty):
        super().__init__(f'La cantidad debe ser un entero mayor a cero (recibida: {qty!r})')


class InsufficientStockError(BusinessLogicError):
    """Raised when an operation fails due to lack of stock."""
    def __init__(self, product_name, required, available):
        req_fmt = f"{int(required)}" if required % 1 == 0 else f"{required:.2f}".rstrip('0').rstrip('.')
        avail_fmt = f"{int(available)}" if available % 1 == 0 else f"{available:.2f}".rstrip('0').rstrip('.')
        message = f"Stock insuficiente para {product_name}: se requieren {req_fmt}, disponible {avail_fmt}"
        super().__init__(message, status_code=409)
        self.product_name = product_name
        self.required = required
        self.available = available


# =====================================================
# SALES AND ORDERS
# =====================================================

class InsufficientPaymentError(BusinessLogicError):
    def __init__(self, paid_cents, required_cents):
        super().__init__(
            'Pagos insuficientes para cubrir el total de la venta',
            payload={'paid_cents': paid_cents, 'required_cents': required_cents}
        )
        self.paid_cents = paid_cents
        self.required_cents = required_cents


class SaleNotFoundError(NotFoundError):
    def __init__(self, sale_id):
        super().__init__(f'Venta #{sale_id} no encontrada', {'sale_id': sale_id})


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id):
        super().__init__(f'Encargo #{order_id} no encontrado', {'order_id': order_id})


class OrderNotPendingError(BusinessLogicError):
    def __init__(self, order_id, status):
        super().__init__(
            f'El encargo #{order_id} no está pendiente (estado actual: {status})',
            status_code=409
        )


class InvalidOrderError(BusinessLogicError):
    """Raised when an advance order fails its creation checks."""
    pass
