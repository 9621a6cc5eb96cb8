import sys

from sqlmodel import Session

from feecalc.db import engine
from feecalc.store import list_charge_records

if len(sys.argv) < 2:
    print("Usage: print_charges.py <YYYY-MM>")
    sys.exit(2)
period = sys.argv[1]

with Session(engine) as s:
    rows = list_charge_records(s, period)
    print("total", len(rows))
    for r in rows:
        print("KEY", r.key, "owner", r.owner_name)
        print("service:", r.service_net, r.service_vat, r.service_total)
        print("parking:", r.parking_net, r.parking_vat, r.parking_total)
        print("water:", r.water_m3, "m3", r.water_net, r.water_vat, r.water_total)
        print("adjustments:", r.adjustments, "due:", r.total_due)
        if r.data_gaps:
            print("gaps:", ", ".join(r.data_gaps))
        print("---")
