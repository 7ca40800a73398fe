import calendar

from jadwal_sholat.models import Dataset, Province, Regency, ScheduleEntry

TIMESTAMP = 1704067200000  # 2024-01-01T00:00:00Z

ACEH_REGENCIES = [
    "KAB. ACEH BARAT", "KAB. ACEH BARAT DAYA", "KAB. ACEH BESAR", "KAB. ACEH JAYA",
    "KAB. ACEH SELATAN", "KAB. ACEH SINGKIL", "KAB. ACEH TAMIANG", "KAB. ACEH TENGAH",
    "KAB. ACEH TENGGARA", "KAB. ACEH TIMUR", "KAB. ACEH UTARA", "KAB. BENER MERIAH",
    "KAB. BIREUEN", "KAB. GAYO LUES", "KAB. NAGAN RAYA", "KAB. PIDIE", "KAB. PIDIE JAYA",
    "KAB. SIMEULUE", "KOTA BANDA ACEH", "KOTA LANGSA", "KOTA LHOKSEUMAWE", "KOTA SABANG",
    "KOTA SUBULUSSALAM",
]

PROVINCES = [
    "ACEH", "SUMATERA UTARA", "SUMATERA BARAT", "RIAU", "JAMBI", "SUMATERA SELATAN",
    "BENGKULU", "LAMPUNG", "KEP. BANGKA BELITUNG", "KEP. RIAU", "DKI JAKARTA", "JAWA BARAT",
    "JAWA TENGAH", "D.I. YOGYAKARTA", "JAWA TIMUR", "BANTEN", "BALI", "NUSA TENGGARA BARAT",
    "NUSA TENGGARA TIMUR", "KALIMANTAN BARAT", "KALIMANTAN TENGAH", "KALIMANTAN SELATAN",
    "KALIMANTAN TIMUR", "KALIMANTAN UTARA", "SULAWESI UTARA", "SULAWESI TENGAH",
    "SULAWESI SELATAN", "SULAWESI TENGGARA", "GORONTALO", "SULAWESI BARAT", "MALUKU",
    "MALUKU UTARA", "PAPUA BARAT", "PAPUA",
]

# Imsya .. Isya for an ordinary day
BASE_TIMES = [(4, 20), (4, 30), (5, 45), (6, 0), (12, 5), (15, 25), (18, 10), (19, 20)]


def leap_year_days():
    return [(m, d) for m in range(1, 13) for d in range(1, calendar.monthrange(2024, m)[1] + 1)]

def make_day(month, date, shift):
    pairs = [divmod(h * 60 + m + shift, 60) for h, m in BASE_TIMES]
    return ScheduleEntry.from_pairs(month, date, pairs)

def make_regency(name, days, seed=0):
    return Regency(name, [make_day(m, d, (seed + i) % 20) for i, (m, d) in enumerate(days)])

def make_dataset(provinces, days, timestamp=TIMESTAMP):
    """provinces: [(province name, [regency names])]"""
    dataset = Dataset(timestamp)
    seed = 0
    for name, regencies in provinces:
        province = Province(name)
        for regency in regencies:
            province.regencies.append(make_regency(regency, days, seed))
            seed += 7
        dataset.provinces.append(province)
    return dataset

def national_dataset(days=None):
    days = days or [(1, 1), (1, 2), (3, 11)]
    provinces = [("ACEH", ACEH_REGENCIES)]
    provinces += [(name, [f"KAB. {name}", f"KOTA {name}"]) for name in PROVINCES[1:]]
    return make_dataset(provinces, days)

def small_dataset(days=None):
    days = days or [(1, 1), (1, 2), (2, 29)]
    return make_dataset([
        ("DKI JAKARTA", ["KOTA JAKARTA PUSAT", "KOTA JAKARTA SELATAN"]),
        ("BALI", ["KAB. BADUNG", "KOTA DENPASAR", "KAB. GIANYAR"]),
    ], days)
