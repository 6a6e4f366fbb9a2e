from .document import Document, DocumentLine, Payment
from .proxies import Invoice, CreditNote, ManualVoucher, PurchaseVoucher, PurchaseCreditNote
