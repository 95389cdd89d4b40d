"""User-facing alert texts."""

ADVISORY_SUFFIX = "Based on your user role, the ship date has not been cleared, but proceed with caution."

BLACKOUT_DATE = "This date is closed for shipments, please select another date."

BLACKOUT_SPECIAL_ITEM = (
    "This sales order includes a {code} item code remaining to be completed and this date is closed "
    "for {code} deliveries, please select another date."
)

BLACKOUT_NEW_LINE = (
    "This newly added line item is a {code} item. The selected Ship Date ({ship_date}) is closed for "
    "{code} deliveries. The Ship Date has been cleared. Please select another ship date."
)

MONDAY_LIMIT = "Delivery distance on Monday is limited to {miles:g} miles."

EXTENDED_BAND_WRONG_DAY = "Delivery distances between {low:g}-{high:g} miles require a {weekday} delivery."

EXTENDED_BAND_SURCHARGE = (
    "Please Remember This is Outside of Our Covered Service Area and Will Be Serviced by a 3rd Party. "
    "The Following Conditions Must be Met When Scheduling Between {low:g} - {high:g} Miles: "
    "Mandatory $49.95 Delivery Fee, Additional $199.95 Per Trip Fee (use code LONGR), "
    "and Field Measure or VFM is Required"
)

OUT_OF_RANGE = "Delivery distances greater than {high:g} miles are not permitted."

CLEARED = "The ship date has been cleared."

OUT_OF_RANGE_CLEARED = "Your ship date has been cleared."

WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")


def with_outcome(base: str, cleared: bool, cleared_text: str = CLEARED) -> str:
    return f"{base} {cleared_text if cleared else ADVISORY_SUFFIX}"
