"""
Drug Pricing Constants

Retail estimates derived from NADAC wholesale acquisition costs.
"""


class DrugPricingDefaults:
    """Markups applied on top of the NADAC per-unit cost."""

    DISPENSING_FEE = 10.00
    GENERIC_MARKUP = 0.20
    BRAND_MARKUP = 0.15  # lower margin on brands
    DISCOUNT_PHARMACY_MARKUP = 0.10  # warehouse and big-box pharmacies
    NINETY_DAY_DISCOUNT = 0.10
    UNITS_PER_MONTH = 30
    GENERIC_CLASSIFICATION = "G"
    OTC_FLAG = "Y"
