from .entity import Entity, UserProfile
from .number_series import NumberSeries
from .account import Account
from .vat import VatCode
from .accounting_period import AccountingPeriod
