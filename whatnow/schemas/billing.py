from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BillingStatus(BaseModel):
    has_paid: bool = False
    paywall_enabled: bool = False

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
