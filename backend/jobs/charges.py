"""
Freight charge templates used to price a job before invoicing.

All rates are USD. Air is billed per chargeable kg, sea per container,
road per gross kg; each mode adds one flat handling line.
"""
from decimal import Decimal

AIR_FREIGHT_RATE = Decimal('12.50')
AIR_HANDLING_CHARGE = Decimal('150.00')
SEA_FREIGHT_RATE_20FT = Decimal('6500.00')
SEA_FREIGHT_RATE_40FT = Decimal('8500.00')
SEA_TRANSPORT_CHARGE = Decimal('4000.00')
ROAD_FREIGHT_RATE = Decimal('2.50')
ROAD_LOADING_CHARGE = Decimal('500.00')

CHARGES_CURRENCY = 'USD'


def _port_label(port):
    # "Mombasa - MSA" -> "MSA"
    if not port:
        return ''
    parts = port.split(' - ')
    return parts[1] if len(parts) > 1 else port


def _charge(description, rate, amount):
    return {'description': description, 'rate': rate, 'amount': amount.quantize(Decimal('0.01'))}


def calculate_freight_charges(job):
    """Return the list of ``{description, rate, amount}`` charges for a job"""
    mode = job.freight_mode
    charges = []

    if mode == 'air':
        weight = job.chargeable_weight or Decimal('0')
        charges.append(_charge('Air Freight Charges', AIR_FREIGHT_RATE, weight * AIR_FREIGHT_RATE))
        charges.append(_charge('Air Handling Charges', AIR_HANDLING_CHARGE, AIR_HANDLING_CHARGE))
    elif mode == 'sea':
        package = (job.package or '').lower()
        rate = SEA_FREIGHT_RATE_40FT if '40ft' in package else SEA_FREIGHT_RATE_20FT
        charges.append(_charge('Sea Freight Charges', rate, rate))
        route = '-'.join(label for label in (_port_label(job.port_of_loading), _port_label(job.port_of_discharge)) if label)
        description = f'Transport Charges {route}' if route else 'Transport Charges'
        charges.append(_charge(description, SEA_TRANSPORT_CHARGE, SEA_TRANSPORT_CHARGE))
    elif mode == 'road':
        weight = job.gross_weight or Decimal('0')
        charges.append(_charge('Road Freight Charges', ROAD_FREIGHT_RATE, weight * ROAD_FREIGHT_RATE))
        charges.append(_charge('Loading/Unloading Charges', ROAD_LOADING_CHARGE, ROAD_LOADING_CHARGE))

    return charges


def charge_line_items(job):
    """Invoice line items for a job's freight charges (no VAT)"""
    based_on = 'Qty & UOM' if job.freight_mode == 'air' else 'Shipment'
    return [
        {
            'description': charge['description'],
            'based_on': based_on,
            'rate': charge['rate'],
            'currency': CHARGES_CURRENCY,
            'amount': charge['amount'],
            'tax_percent': None,
            'tax_amount': Decimal('0.00'),
            'billing_amount': charge['amount'],
        }
        for charge in calculate_freight_charges(job)
    ]


def booking_number_for(job):
    """Reference printed as the booking number: master B/L, master AWB or plate number"""
    mode = job.freight_mode
    if mode == 'sea':
        return job.master_bl
    if mode == 'air':
        return job.master_air_waybill
    if mode == 'road':
        return job.plate_number
    return None
