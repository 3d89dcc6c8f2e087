"""Worldwide airport reference data used for location autocomplete.

Each entry is (iata_code, airport_name, city, country, country_code).
"""

AIRPORTS: list[tuple[str, str, str, str, str]] = [
    # Brazil
    ("GRU", "São Paulo/Guarulhos International Airport", "São Paulo", "Brazil", "BR"),
    ("GIG", "Rio de Janeiro/Galeão International Airport", "Rio de Janeiro", "Brazil", "BR"),
    ("CGH", "São Paulo/Congonhas Airport", "São Paulo", "Brazil", "BR"),
    ("SDU", "Rio de Janeiro/Santos Dumont Airport", "Rio de Janeiro", "Brazil", "BR"),
    ("BSB", "Brasília International Airport", "Brasília", "Brazil", "BR"),
    ("CNF", "Belo Horizonte/Confins International Airport", "Belo Horizonte", "Brazil", "BR"),
    ("SSA", "Salvador International Airport", "Salvador", "Brazil", "BR"),
    ("REC", "Recife/Guararapes International Airport", "Recife", "Brazil", "BR"),
    ("FOR", "Fortaleza International Airport", "Fortaleza", "Brazil", "BR"),
    ("POA", "Porto Alegre International Airport", "Porto Alegre", "Brazil", "BR"),
    ("CWB", "Curitiba/Afonso Pena International Airport", "Curitiba", "Brazil", "BR"),
    ("FLN", "Florianópolis International Airport", "Florianópolis", "Brazil", "BR"),
    ("VCP", "Campinas/Viracopos International Airport", "Campinas", "Brazil", "BR"),
    ("MAO", "Manaus/Eduardo Gomes International Airport", "Manaus", "Brazil", "BR"),
    ("BEL", "Belém/Val de Cans International Airport", "Belém", "Brazil", "BR"),
    ("NAT", "Natal/São Gonçalo do Amarante International Airport", "Natal", "Brazil", "BR"),
    ("MCZ", "Maceió/Zumbi dos Palmares International Airport", "Maceió", "Brazil", "BR"),
    ("VIX", "Vitória/Eurico de Aguiar Salles Airport", "Vitória", "Brazil", "BR"),
    ("GYN", "Goiânia/Santa Genoveva Airport", "Goiânia", "Brazil", "BR"),
    ("CGB", "Cuiabá/Marechal Rondon International Airport", "Cuiabá", "Brazil", "BR"),

    # Portugal
    ("LIS", "Lisbon Humberto Delgado Airport", "Lisboa", "Portugal", "PT"),
    ("OPO", "Porto Francisco Sá Carneiro Airport", "Porto", "Portugal", "PT"),
    ("FAO", "Faro Airport", "Faro", "Portugal", "PT"),
    ("FNC", "Madeira/Funchal Airport", "Funchal", "Portugal", "PT"),
    ("PDL", "Ponta Delgada/João Paulo II Airport", "Ponta Delgada", "Portugal", "PT"),

    # Spain
    ("MAD", "Madrid Barajas International Airport", "Madrid", "Spain", "ES"),
    ("BCN", "Barcelona El Prat Airport", "Barcelona", "Spain", "ES"),
    ("PMI", "Palma de Mallorca Airport", "Palma de Mallorca", "Spain", "ES"),
    ("AGP", "Málaga Costa del Sol Airport", "Málaga", "Spain", "ES"),
    ("ALC", "Alicante-Elche Airport", "Alicante", "Spain", "ES"),
    ("VLC", "Valencia Airport", "Valencia", "Spain", "ES"),
    ("SVQ", "Seville Airport", "Seville", "Spain", "ES"),
    ("BIO", "Bilbao Airport", "Bilbao", "Spain", "ES"),
    ("TFS", "Tenerife South Airport", "Tenerife", "Spain", "ES"),
    ("LPA", "Gran Canaria Airport", "Las Palmas", "Spain", "ES"),

    # United States
    ("JFK", "John F. Kennedy International Airport", "New York", "United States", "US"),
    ("LAX", "Los Angeles International Airport", "Los Angeles", "United States", "US"),
    ("ORD", "O'Hare International Airport", "Chicago", "United States", "US"),
    ("ATL", "Hartsfield-Jackson Atlanta International Airport", "Atlanta", "United States", "US"),
    ("DFW", "Dallas/Fort Worth International Airport", "Dallas", "United States", "US"),
    ("DEN", "Denver International Airport", "Denver", "United States", "US"),
    ("SFO", "San Francisco International Airport", "San Francisco", "United States", "US"),
    ("SEA", "Seattle-Tacoma International Airport", "Seattle", "United States", "US"),
    ("MIA", "Miami International Airport", "Miami", "United States", "US"),
    ("BOS", "Boston Logan International Airport", "Boston", "United States", "US"),
    ("EWR", "Newark Liberty International Airport", "Newark", "United States", "US"),
    ("LGA", "LaGuardia Airport", "New York", "United States", "US"),
    ("MCO", "Orlando International Airport", "Orlando", "United States", "US"),
    ("PHX", "Phoenix Sky Harbor International Airport", "Phoenix", "United States", "US"),
    ("IAH", "George Bush Intercontinental Airport", "Houston", "United States", "US"),
    ("LAS", "Harry Reid International Airport", "Las Vegas", "United States", "US"),
    ("MSP", "Minneapolis-Saint Paul International Airport", "Minneapolis", "United States", "US"),
    ("DTW", "Detroit Metropolitan Airport", "Detroit", "United States", "US"),
    ("PHL", "Philadelphia International Airport", "Philadelphia", "United States", "US"),
    ("CLT", "Charlotte Douglas International Airport", "Charlotte", "United States", "US"),
    ("FLL", "Fort Lauderdale-Hollywood International Airport", "Fort Lauderdale", "United States", "US"),
    ("BWI", "Baltimore/Washington International Airport", "Baltimore", "United States", "US"),
    ("DCA", "Ronald Reagan Washington National Airport", "Washington D.C.", "United States", "US"),
    ("IAD", "Washington Dulles International Airport", "Washington D.C.", "United States", "US"),
    ("SAN", "San Diego International Airport", "San Diego", "United States", "US"),
    ("TPA", "Tampa International Airport", "Tampa", "United States", "US"),
    ("SLC", "Salt Lake City International Airport", "Salt Lake City", "United States", "US"),
    ("PDX", "Portland International Airport", "Portland", "United States", "US"),
    ("HNL", "Daniel K. Inouye International Airport", "Honolulu", "United States", "US"),
    ("AUS", "Austin-Bergstrom International Airport", "Austin", "United States", "US"),

    # United Kingdom
    ("LHR", "London Heathrow Airport", "London", "United Kingdom", "GB"),
    ("LGW", "London Gatwick Airport", "London", "United Kingdom", "GB"),
    ("STN", "London Stansted Airport", "London", "United Kingdom", "GB"),
    ("LTN", "London Luton Airport", "London", "United Kingdom", "GB"),
    ("MAN", "Manchester Airport", "Manchester", "United Kingdom", "GB"),
    ("EDI", "Edinburgh Airport", "Edinburgh", "United Kingdom", "GB"),
    ("BHX", "Birmingham Airport", "Birmingham", "United Kingdom", "GB"),
    ("GLA", "Glasgow Airport", "Glasgow", "United Kingdom", "GB"),
    ("BRS", "Bristol Airport", "Bristol", "United Kingdom", "GB"),
    ("LCY", "London City Airport", "London", "United Kingdom", "GB"),

    # France
    ("CDG", "Paris Charles de Gaulle Airport", "Paris", "France", "FR"),
    ("ORY", "Paris Orly Airport", "Paris", "France", "FR"),
    ("NCE", "Nice Côte d'Azur Airport", "Nice", "France", "FR"),
    ("LYS", "Lyon-Saint Exupéry Airport", "Lyon", "France", "FR"),
    ("MRS", "Marseille Provence Airport", "Marseille", "France", "FR"),
    ("TLS", "Toulouse-Blagnac Airport", "Toulouse", "France", "FR"),
    ("BOD", "Bordeaux-Mérignac Airport", "Bordeaux", "France", "FR"),
    ("NTE", "Nantes Atlantique Airport", "Nantes", "France", "FR"),

    # Germany
    ("FRA", "Frankfurt Airport", "Frankfurt", "Germany", "DE"),
    ("MUC", "Munich Airport", "Munich", "Germany", "DE"),
    ("BER", "Berlin Brandenburg Airport", "Berlin", "Germany", "DE"),
    ("DUS", "Düsseldorf Airport", "Düsseldorf", "Germany", "DE"),
    ("HAM", "Hamburg Airport", "Hamburg", "Germany", "DE"),
    ("CGN", "Cologne Bonn Airport", "Cologne", "Germany", "DE"),
    ("STR", "Stuttgart Airport", "Stuttgart", "Germany", "DE"),
    ("HAJ", "Hannover Airport", "Hannover", "Germany", "DE"),

    # Italy
    ("FCO", "Rome Fiumicino Airport", "Rome", "Italy", "IT"),
    ("MXP", "Milan Malpensa Airport", "Milan", "Italy", "IT"),
    ("LIN", "Milan Linate Airport", "Milan", "Italy", "IT"),
    ("VCE", "Venice Marco Polo Airport", "Venice", "Italy", "IT"),
    ("NAP", "Naples International Airport", "Naples", "Italy", "IT"),
    ("BGY", "Milan Bergamo Airport", "Bergamo", "Italy", "IT"),
    ("BLQ", "Bologna Guglielmo Marconi Airport", "Bologna", "Italy", "IT"),
    ("FLR", "Florence Airport", "Florence", "Italy", "IT"),
    ("PSA", "Pisa International Airport", "Pisa", "Italy", "IT"),
    ("CIA", "Rome Ciampino Airport", "Rome", "Italy", "IT"),

    # Netherlands
    ("AMS", "Amsterdam Schiphol Airport", "Amsterdam", "Netherlands", "NL"),
    ("EIN", "Eindhoven Airport", "Eindhoven", "Netherlands", "NL"),
    ("RTM", "Rotterdam The Hague Airport", "Rotterdam", "Netherlands", "NL"),

    # Belgium
    ("BRU", "Brussels Airport", "Brussels", "Belgium", "BE"),
    ("CRL", "Brussels South Charleroi Airport", "Charleroi", "Belgium", "BE"),

    # Switzerland
    ("ZRH", "Zurich Airport", "Zurich", "Switzerland", "CH"),
    ("GVA", "Geneva Airport", "Geneva", "Switzerland", "CH"),
    ("BSL", "EuroAirport Basel-Mulhouse-Freiburg", "Basel", "Switzerland", "CH"),

    # Austria
    ("VIE", "Vienna International Airport", "Vienna", "Austria", "AT"),
    ("SZG", "Salzburg Airport", "Salzburg", "Austria", "AT"),
    ("INN", "Innsbruck Airport", "Innsbruck", "Austria", "AT"),

    # Ireland
    ("DUB", "Dublin Airport", "Dublin", "Ireland", "IE"),
    ("SNN", "Shannon Airport", "Shannon", "Ireland", "IE"),
    ("ORK", "Cork Airport", "Cork", "Ireland", "IE"),

    # Scandinavia
    ("CPH", "Copenhagen Airport", "Copenhagen", "Denmark", "DK"),
    ("OSL", "Oslo Gardermoen Airport", "Oslo", "Norway", "NO"),
    ("ARN", "Stockholm Arlanda Airport", "Stockholm", "Sweden", "SE"),
    ("HEL", "Helsinki-Vantaa Airport", "Helsinki", "Finland", "FI"),
    ("GOT", "Gothenburg Landvetter Airport", "Gothenburg", "Sweden", "SE"),
    ("BGO", "Bergen Airport", "Bergen", "Norway", "NO"),

    # Eastern Europe
    ("PRG", "Václav Havel Airport Prague", "Prague", "Czech Republic", "CZ"),
    ("WAW", "Warsaw Chopin Airport", "Warsaw", "Poland", "PL"),
    ("KRK", "Kraków John Paul II International Airport", "Kraków", "Poland", "PL"),
    ("BUD", "Budapest Ferenc Liszt International Airport", "Budapest", "Hungary", "HU"),
    ("OTP", "Henri Coandă International Airport", "Bucharest", "Romania", "RO"),
    ("SOF", "Sofia Airport", "Sofia", "Bulgaria", "BG"),

    # Greece
    ("ATH", "Athens International Airport", "Athens", "Greece", "GR"),
    ("SKG", "Thessaloniki Airport", "Thessaloniki", "Greece", "GR"),
    ("HER", "Heraklion International Airport", "Heraklion", "Greece", "GR"),
    ("RHO", "Rhodes International Airport", "Rhodes", "Greece", "GR"),
    ("JMK", "Mykonos Island National Airport", "Mykonos", "Greece", "GR"),
    ("JTR", "Santorini Airport", "Santorini", "Greece", "GR"),

    # Turkey
    ("IST", "Istanbul Airport", "Istanbul", "Turkey", "TR"),
    ("SAW", "Istanbul Sabiha Gökçen Airport", "Istanbul", "Turkey", "TR"),
    ("AYT", "Antalya Airport", "Antalya", "Turkey", "TR"),
    ("ESB", "Ankara Esenboğa Airport", "Ankara", "Turkey", "TR"),
    ("ADB", "Izmir Adnan Menderes Airport", "Izmir", "Turkey", "TR"),

    # Middle East
    ("DXB", "Dubai International Airport", "Dubai", "United Arab Emirates", "AE"),
    ("AUH", "Abu Dhabi International Airport", "Abu Dhabi", "United Arab Emirates", "AE"),
    ("DOH", "Hamad International Airport", "Doha", "Qatar", "QA"),
    ("TLV", "Ben Gurion Airport", "Tel Aviv", "Israel", "IL"),
    ("AMM", "Queen Alia International Airport", "Amman", "Jordan", "JO"),
    ("CAI", "Cairo International Airport", "Cairo", "Egypt", "EG"),
    ("RUH", "King Khalid International Airport", "Riyadh", "Saudi Arabia", "SA"),
    ("JED", "King Abdulaziz International Airport", "Jeddah", "Saudi Arabia", "SA"),
    ("KWI", "Kuwait International Airport", "Kuwait City", "Kuwait", "KW"),
    ("BAH", "Bahrain International Airport", "Manama", "Bahrain", "BH"),
    ("MCT", "Muscat International Airport", "Muscat", "Oman", "OM"),

    # Asia
    ("HND", "Tokyo Haneda Airport", "Tokyo", "Japan", "JP"),
    ("NRT", "Narita International Airport", "Tokyo", "Japan", "JP"),
    ("KIX", "Kansai International Airport", "Osaka", "Japan", "JP"),
    ("ICN", "Incheon International Airport", "Seoul", "South Korea", "KR"),
    ("GMP", "Gimpo International Airport", "Seoul", "South Korea", "KR"),
    ("PEK", "Beijing Capital International Airport", "Beijing", "China", "CN"),
    ("PKX", "Beijing Daxing International Airport", "Beijing", "China", "CN"),
    ("PVG", "Shanghai Pudong International Airport", "Shanghai", "China", "CN"),
    ("SHA", "Shanghai Hongqiao International Airport", "Shanghai", "China", "CN"),
    ("CAN", "Guangzhou Baiyun International Airport", "Guangzhou", "China", "CN"),
    ("HKG", "Hong Kong International Airport", "Hong Kong", "Hong Kong", "HK"),
    ("TPE", "Taiwan Taoyuan International Airport", "Taipei", "Taiwan", "TW"),
    ("SIN", "Singapore Changi Airport", "Singapore", "Singapore", "SG"),
    ("BKK", "Suvarnabhumi Airport", "Bangkok", "Thailand", "TH"),
    ("DMK", "Don Mueang International Airport", "Bangkok", "Thailand", "TH"),
    ("HKT", "Phuket International Airport", "Phuket", "Thailand", "TH"),
    ("KUL", "Kuala Lumpur International Airport", "Kuala Lumpur", "Malaysia", "MY"),
    ("CGK", "Soekarno-Hatta International Airport", "Jakarta", "Indonesia", "ID"),
    ("DPS", "Ngurah Rai International Airport", "Bali", "Indonesia", "ID"),
    ("MNL", "Ninoy Aquino International Airport", "Manila", "Philippines", "PH"),
    ("SGN", "Tan Son Nhat International Airport", "Ho Chi Minh City", "Vietnam", "VN"),
    ("HAN", "Noi Bai International Airport", "Hanoi", "Vietnam", "VN"),
    ("DEL", "Indira Gandhi International Airport", "New Delhi", "India", "IN"),
    ("BOM", "Chhatrapati Shivaji Maharaj International Airport", "Mumbai", "India", "IN"),
    ("BLR", "Kempegowda International Airport", "Bangalore", "India", "IN"),
    ("MAA", "Chennai International Airport", "Chennai", "India", "IN"),
    ("CCU", "Netaji Subhas Chandra Bose International Airport", "Kolkata", "India", "IN"),

    # Oceania
    ("SYD", "Sydney Kingsford Smith Airport", "Sydney", "Australia", "AU"),
    ("MEL", "Melbourne Airport", "Melbourne", "Australia", "AU"),
    ("BNE", "Brisbane Airport", "Brisbane", "Australia", "AU"),
    ("PER", "Perth Airport", "Perth", "Australia", "AU"),
    ("ADL", "Adelaide Airport", "Adelaide", "Australia", "AU"),
    ("AKL", "Auckland Airport", "Auckland", "New Zealand", "NZ"),
    ("WLG", "Wellington International Airport", "Wellington", "New Zealand", "NZ"),
    ("CHC", "Christchurch International Airport", "Christchurch", "New Zealand", "NZ"),

    # Africa
    ("JNB", "O.R. Tambo International Airport", "Johannesburg", "South Africa", "ZA"),
    ("CPT", "Cape Town International Airport", "Cape Town", "South Africa", "ZA"),
    ("DUR", "King Shaka International Airport", "Durban", "South Africa", "ZA"),
    ("NBO", "Jomo Kenyatta International Airport", "Nairobi", "Kenya", "KE"),
    ("ADD", "Addis Ababa Bole International Airport", "Addis Ababa", "Ethiopia", "ET"),
    ("LOS", "Murtala Muhammed International Airport", "Lagos", "Nigeria", "NG"),
    ("CMN", "Mohammed V International Airport", "Casablanca", "Morocco", "MA"),
    ("RAK", "Marrakech Menara Airport", "Marrakech", "Morocco", "MA"),
    ("TUN", "Tunis-Carthage International Airport", "Tunis", "Tunisia", "TN"),
    ("ALG", "Houari Boumediene Airport", "Algiers", "Algeria", "DZ"),

    # Latin America
    ("MEX", "Mexico City International Airport", "Mexico City", "Mexico", "MX"),
    ("CUN", "Cancún International Airport", "Cancún", "Mexico", "MX"),
    ("GDL", "Guadalajara International Airport", "Guadalajara", "Mexico", "MX"),
    ("MTY", "Monterrey International Airport", "Monterrey", "Mexico", "MX"),
    ("SJO", "Juan Santamaría International Airport", "San José", "Costa Rica", "CR"),
    ("PTY", "Tocumen International Airport", "Panama City", "Panama", "PA"),
    ("BOG", "El Dorado International Airport", "Bogotá", "Colombia", "CO"),
    ("MDE", "José María Córdova International Airport", "Medellín", "Colombia", "CO"),
    ("CTG", "Rafael Núñez International Airport", "Cartagena", "Colombia", "CO"),
    ("LIM", "Jorge Chávez International Airport", "Lima", "Peru", "PE"),
    ("CUZ", "Alejandro Velasco Astete International Airport", "Cusco", "Peru", "PE"),
    ("SCL", "Arturo Merino Benítez International Airport", "Santiago", "Chile", "CL"),
    ("EZE", "Ministro Pistarini International Airport", "Buenos Aires", "Argentina", "AR"),
    ("AEP", "Jorge Newbery Airfield", "Buenos Aires", "Argentina", "AR"),
    ("COR", "Ingeniero Aeronáutico Ambrosio L.V. Taravella International Airport", "Córdoba", "Argentina", "AR"),
    ("MVD", "Carrasco International Airport", "Montevideo", "Uruguay", "UY"),
    ("ASU", "Silvio Pettirossi International Airport", "Asunción", "Paraguay", "PY"),
    ("VVI", "Viru Viru International Airport", "Santa Cruz", "Bolivia", "BO"),
    ("LPB", "El Alto International Airport", "La Paz", "Bolivia", "BO"),
    ("UIO", "Mariscal Sucre International Airport", "Quito", "Ecuador", "EC"),
    ("GYE", "José Joaquín de Olmedo International Airport", "Guayaquil", "Ecuador", "EC"),
    ("CCS", "Simón Bolívar International Airport", "Caracas", "Venezuela", "VE"),

    # Caribbean
    ("HAV", "José Martí International Airport", "Havana", "Cuba", "CU"),
    ("SJU", "Luis Muñoz Marín International Airport", "San Juan", "Puerto Rico", "PR"),
    ("SDQ", "Las Américas International Airport", "Santo Domingo", "Dominican Republic", "DO"),
    ("PUJ", "Punta Cana International Airport", "Punta Cana", "Dominican Republic", "DO"),
    ("MBJ", "Sangster International Airport", "Montego Bay", "Jamaica", "JM"),
    ("KIN", "Norman Manley International Airport", "Kingston", "Jamaica", "JM"),
    ("NAS", "Lynden Pindling International Airport", "Nassau", "Bahamas", "BS"),
    ("AUA", "Queen Beatrix International Airport", "Oranjestad", "Aruba", "AW"),
    ("CUR", "Curaçao International Airport", "Willemstad", "Curaçao", "CW"),
    ("BGI", "Grantley Adams International Airport", "Bridgetown", "Barbados", "BB"),

    # Canada
    ("YYZ", "Toronto Pearson International Airport", "Toronto", "Canada", "CA"),
    ("YVR", "Vancouver International Airport", "Vancouver", "Canada", "CA"),
    ("YUL", "Montréal-Pierre Elliott Trudeau International Airport", "Montreal", "Canada", "CA"),
    ("YYC", "Calgary International Airport", "Calgary", "Canada", "CA"),
    ("YEG", "Edmonton International Airport", "Edmonton", "Canada", "CA"),
    ("YOW", "Ottawa Macdonald-Cartier International Airport", "Ottawa", "Canada", "CA"),
    ("YWG", "Winnipeg James Armstrong Richardson International Airport", "Winnipeg", "Canada", "CA"),
    ("YHZ", "Halifax Stanfield International Airport", "Halifax", "Canada", "CA"),

    # Russia
    ("SVO", "Sheremetyevo International Airport", "Moscow", "Russia", "RU"),
    ("DME", "Domodedovo International Airport", "Moscow", "Russia", "RU"),
    ("VKO", "Vnukovo International Airport", "Moscow", "Russia", "RU"),
    ("LED", "Pulkovo Airport", "Saint Petersburg", "Russia", "RU"),
]


def search_local_airports(keyword: str, limit: int = 15) -> list[dict]:
    """Search the bundled airport list by IATA code, city, airport name or country.

    An exact IATA code match short-circuits. Otherwise results are ranked
    exact city match first, then code prefix, then city prefix.
    """
    if not keyword or len(keyword.strip()) < 2:
        return []

    term = keyword.strip().lower()

    exact = [a for a in AIRPORTS if a[0].lower() == term]
    if exact:
        return [_airport_to_dict(a) for a in exact]

    matches = [
        a for a in AIRPORTS
        if term in a[0].lower() or term in a[2].lower() or term in a[1].lower() or term in a[3].lower()
    ]
    # sorted() is stable, so ties keep list order
    matches = sorted(
        matches,
        key=lambda a: (
            a[2].lower() != term,
            not a[0].lower().startswith(term),
            not a[2].lower().startswith(term),
        ),
    )
    return [_airport_to_dict(a) for a in matches[:limit]]


def get_airport_by_code(code: str) -> dict | None:
    code = code.strip().upper()
    for airport in AIRPORTS:
        if airport[0] == code:
            return _airport_to_dict(airport)
    return None


def _airport_to_dict(airport: tuple[str, str, str, str, str]) -> dict:
    code, name, city, country, country_code = airport
    return {
        "code": code,
        "name": name,
        "city": city,
        "country": country,
        "country_code": country_code,
        "type": "AIRPORT",
        "source": "local",
    }
