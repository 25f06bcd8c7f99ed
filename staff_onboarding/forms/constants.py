"""Option tables offered by the onboarding forms.

The values are what gets stored in the submission row, so renaming an
entry breaks existing data.
"""

JOB_TITLES: tuple[str, ...] = (
    "Accountant",
    "Admin Assistant",
    "Admin Manager",
    "Assistant Manager",
    "Business Development Manager",
    "Consultant",
    "Customer Service Representative",
    "Designer",
    "Director",
    "Driver",
    "Engineer",
    "Finance Manager",
    "General Manager",
    "HR Executive",
    "HR Manager",
    "IT Manager",
    "IT Specialist",
    "Legal Advisor",
    "Manager",
    "Marketing Executive",
    "Marketing Manager",
    "Office Boy",
    "Operations Manager",
    "PRO (Public Relations Officer)",
    "Project Manager",
    "Receptionist",
    "Sales Executive",
    "Sales Manager",
    "Senior Accountant",
    "Supervisor",
    "Technician",
    "Other",
)

DEPARTMENTS: tuple[str, ...] = (
    "Administration",
    "Business Development",
    "Customer Service",
    "Finance & Accounting",
    "Human Resources",
    "Information Technology",
    "Legal",
    "Logistics",
    "Maintenance",
    "Marketing",
    "Operations",
    "Procurement",
    "Production",
    "Quality Assurance",
    "Research & Development",
    "Sales",
    "Security",
    "Other",
)

RELIGIONS: tuple[str, ...] = (
    "Muslim - Sunni",
    "Muslim - Shia",
    "Christian - Catholic",
    "Christian - Protestant",
    "Christian - Orthodox",
    "Christian - Other",
    "Hindu",
    "Buddhist",
    "Jewish",
    "Sikh",
    "Jain",
    "Zoroastrian",
    "Bahai",
    "Atheist/Non-religious",
    "Other",
)

EDUCATIONAL_QUALIFICATIONS: tuple[str, ...] = (
    "Primary School",
    "Secondary School / High School",
    "Vocational Certificate",
    "Diploma",
    "Bachelor's Degree",
    "Master's Degree",
    "Doctorate (PhD)",
    "Professional Certification",
    "Other",
)

LANGUAGES: tuple[str, ...] = (
    "English",
    "Arabic",
    "Hindi",
    "Urdu",
    "Tagalog",
    "Malayalam",
    "Tamil",
    "Bengali",
    "Nepali",
    "Sinhala",
    "French",
    "Spanish",
    "German",
    "Russian",
    "Chinese (Mandarin)",
    "Chinese (Cantonese)",
    "Japanese",
    "Korean",
    "Portuguese",
    "Italian",
    "Farsi",
    "Turkish",
    "Pashto",
    "Dutch",
    "Other",
)

NATIONALITIES: tuple[str, ...] = (
    "Afghanistan",
    "Albania",
    "Algeria",
    "Andorra",
    "Angola",
    "Antigua and Barbuda",
    "Argentina",
    "Armenia",
    "Australia",
    "Austria",
    "Azerbaijan",
    "Bahamas",
    "Bahrain",
    "Bangladesh",
    "Barbados",
    "Belarus",
    "Belgium",
    "Belize",
    "Benin",
    "Bhutan",
    "Bolivia",
    "Bosnia and Herzegovina",
    "Botswana",
    "Brazil",
    "Brunei",
    "Bulgaria",
    "Burkina Faso",
    "Burundi",
    "Cambodia",
    "Cameroon",
    "Canada",
    "Cape Verde",
    "Central African Republic",
    "Chad",
    "Chile",
    "China",
    "Colombia",
    "Comoros",
    "Congo (DRC)",
    "Congo (Republic)",
    "Costa Rica",
    "Croatia",
    "Cuba",
    "Cyprus",
    "Czech Republic",
    "Denmark",
    "Djibouti",
    "Dominica",
    "Dominican Republic",
    "East Timor",
    "Ecuador",
    "Egypt",
    "El Salvador",
    "Equatorial Guinea",
    "Eritrea",
    "Estonia",
    "Eswatini",
    "Ethiopia",
    "Fiji",
    "Finland",
    "France",
    "Gabon",
    "Gambia",
    "Georgia",
    "Germany",
    "Ghana",
    "Greece",
    "Grenada",
    "Guatemala",
    "Guinea",
    "Guinea-Bissau",
    "Guyana",
    "Haiti",
    "Honduras",
    "Hungary",
    "Iceland",
    "India",
    "Indonesia",
    "Iran",
    "Iraq",
    "Ireland",
    "Israel",
    "Italy",
    "Ivory Coast",
    "Jamaica",
    "Japan",
    "Jordan",
    "Kazakhstan",
    "Kenya",
    "Kiribati",
    "Kosovo",
    "Kuwait",
    "Kyrgyzstan",
    "Laos",
    "Latvia",
    "Lebanon",
    "Lesotho",
    "Liberia",
    "Libya",
    "Liechtenstein",
    "Lithuania",
    "Luxembourg",
    "Madagascar",
    "Malawi",
    "Malaysia",
    "Maldives",
    "Mali",
    "Malta",
    "Marshall Islands",
    "Mauritania",
    "Mauritius",
    "Mexico",
    "Micronesia",
    "Moldova",
    "Monaco",
    "Mongolia",
    "Montenegro",
    "Morocco",
    "Mozambique",
    "Myanmar",
    "Namibia",
    "Nauru",
    "Nepal",
    "Netherlands",
    "New Zealand",
    "Nicaragua",
    "Niger",
    "Nigeria",
    "North Korea",
    "North Macedonia",
    "Norway",
    "Oman",
    "Pakistan",
    "Palau",
    "Palestine",
    "Panama",
    "Papua New Guinea",
    "Paraguay",
    "Peru",
    "Philippines",
    "Poland",
    "Portugal",
    "Qatar",
    "Romania",
    "Russia",
    "Rwanda",
    "Saint Kitts and Nevis",
    "Saint Lucia",
    "Saint Vincent and the Grenadines",
    "Samoa",
    "San Marino",
    "Sao Tome and Principe",
    "Saudi Arabia",
    "Senegal",
    "Serbia",
    "Seychelles",
    "Sierra Leone",
    "Singapore",
    "Slovakia",
    "Slovenia",
    "Solomon Islands",
    "Somalia",
    "South Africa",
    "South Korea",
    "South Sudan",
    "Spain",
    "Sri Lanka",
    "Sudan",
    "Suriname",
    "Sweden",
    "Switzerland",
    "Syria",
    "Taiwan",
    "Tajikistan",
    "Tanzania",
    "Thailand",
    "Togo",
    "Tonga",
    "Trinidad and Tobago",
    "Tunisia",
    "Turkey",
    "Turkmenistan",
    "Tuvalu",
    "Uganda",
    "Ukraine",
    "United Arab Emirates",
    "United Kingdom",
    "United States",
    "Uruguay",
    "Uzbekistan",
    "Vanuatu",
    "Vatican City",
    "Venezuela",
    "Vietnam",
    "Yemen",
    "Zambia",
    "Zimbabwe",
    "Other",
)

TITLES: tuple[str, ...] = ("Mr", "Mrs", "Ms", "Miss", "Dr", "Prof", "Eng", "Other")

MARITAL_STATUS_OPTIONS: tuple[str, ...] = ("Single", "Married", "Divorced", "Widowed")

# (value, label) pairs
SALARY_CURRENCIES: tuple[tuple[str, str], ...] = (
    ("AED", "AED - UAE Dirham"),
    ("EUR", "EUR - Euro"),
    ("USD", "USD - US Dollar"),
    ("GBP", "GBP - British Pound"),
    ("CHF", "CHF - Swiss Franc"),
)

WEEKLY_OFF_OPTIONS: tuple[tuple[str, str], ...] = (
    ("sunday", "Sunday only"),
    ("saturday_sunday", "Saturday & Sunday"),
)

TIME_PERIOD_UNITS: tuple[tuple[str, str], ...] = (
    ("days", "Day(s)"),
    ("weeks", "Week(s)"),
    ("months", "Month(s)"),
)

LEAVE_TYPES: tuple[tuple[str, str], ...] = (
    ("calendar", "Calendar days"),
    ("working", "Working days"),
)

UAE_PRESENCE_OPTIONS: tuple[tuple[str, str], ...] = (
    ("inside", "Inside UAE"),
    ("outside", "Outside UAE"),
)

DEFAULT_SALARY_BREAKDOWN: dict[str, float] = {
    "basic": 0.6,
    "accommodation": 0.3,
    "transport": 0.1,
    "food": 0.0,
    "other": 0.0,
}

SALARY_BREAKDOWN_EXPLANATION = (
    "Sample common split in the UAE is: Basic 60%, Accommodation 30%, Transport 10%. "
    "The percentage is NOT defined in the UAE Labour Law. It is the employer's decision. "
    "You can adjust these values, but the total must equal the monthly salary."
)

UAE_BANKS: tuple[str, ...] = (
    "Abu Dhabi Commercial Bank (ADCB)",
    "Abu Dhabi Islamic Bank (ADIB)",
    "Ajman Bank",
    "Al Hilal Bank",
    "Arab Bank for Investment & Foreign Trade (Al Masraf)",
    "Bank of Sharjah",
    "Citibank UAE",
    "Commercial Bank of Dubai (CBD)",
    "Dubai Islamic Bank (DIB)",
    "Emirates Islamic Bank",
    "Emirates NBD",
    "First Abu Dhabi Bank (FAB)",
    "HSBC Middle East",
    "Invest Bank",
    "Liv.",
    "Mashreq Bank",
    "National Bank of Fujairah",
    "National Bank of Ras Al-Khaimah (RAKBANK)",
    "Noor Bank",
    "RAKBANK",
    "Sharjah Islamic Bank",
    "Standard Chartered",
    "Union National Bank (UNB)",
    "United Arab Bank (UAB)",
    "WIO Bank",
    "Other",
)


def option_values(options: tuple[tuple[str, str], ...]) -> tuple[str, ...]:
    """Return just the stored values of a ``(value, label)`` table."""
    return tuple(value for value, _ in options)


def as_dropdown(items: tuple[str, ...]) -> list[dict[str, str]]:
    """Turn a plain option tuple into ``{"value", "label"}`` dicts."""
    return [{"value": item, "label": item} for item in items]


def all_option_tables() -> dict[str, list[dict[str, str]]]:
    """Every option table in dropdown form, keyed by table name."""
    labelled = {
        "salary_currencies": SALARY_CURRENCIES,
        "weekly_off_options": WEEKLY_OFF_OPTIONS,
        "time_period_units": TIME_PERIOD_UNITS,
        "leave_types": LEAVE_TYPES,
        "uae_presence_options": UAE_PRESENCE_OPTIONS,
    }
    plain = {
        "job_titles": JOB_TITLES,
        "departments": DEPARTMENTS,
        "religions": RELIGIONS,
        "educational_qualifications": EDUCATIONAL_QUALIFICATIONS,
        "languages": LANGUAGES,
        "nationalities": NATIONALITIES,
        "titles": TITLES,
        "marital_status_options": MARITAL_STATUS_OPTIONS,
        "uae_banks": UAE_BANKS,
    }
    tables = {name: as_dropdown(items) for name, items in plain.items()}
    tables.update(
        {
            name: [{"value": value, "label": label} for value, label in pairs]
            for name, pairs in labelled.items()
        }
    )
    return tables
