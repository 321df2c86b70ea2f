from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

ELIGIBLE = "eligible"
TOO_YOUNG = "ineligible_young"
TOO_OLD = "ineligible_old"

OPEN_CATEGORY = "Open"
UNBOUNDED_BRACKET = 99

SPORT_CRITERIA: dict[str, dict[str, Any]] = {
    "Cricket": {
        "min": 6,
        "max": 45,
        "trophies": {
            "Under-14": "School Nationals, Vijay Merchant Trophy",
            "Under-16": "Vijay Merchant Trophy, Harris Shield",
            "Under-19": "Cooch Behar Trophy, Vinoo Mankad Trophy",
            "Under-23": "CK Nayudu Trophy",
            "Open": "Ranji Trophy, IPL, Duleep Trophy",
        },
    },
    "Football": {
        "min": 5,
        "max": 35,
        "trophies": {
            "Under-13": "Subroto Cup (Sub-Junior)",
            "Under-15": "Nike Premier Cup",
            "Under-17": "Subroto Cup (Junior), BC Roy Trophy",
            "Under-21": "Santosh Trophy (Selection)",
            "Open": "ISL, I-League, Santosh Trophy",
        },
    },
    "Badminton": {
        "min": 6,
        "max": 40,
        "trophies": {
            "Under-13": "Sub-Junior Nationals (Mini)",
            "Under-15": "Sub-Junior Nationals",
            "Under-17": "Junior Nationals",
            "Under-19": "Junior National Championship",
            "Open": "Premier Badminton League, Senior Nationals",
        },
    },
    "Tennis": {
        "min": 5,
        "max": 40,
        "trophies": {
            "Under-12": "AITA Talent Series",
            "Under-14": "AITA Championship Series",
            "Under-16": "AITA Super Series",
            "Under-18": "Junior Nationals, ITF Juniors",
            "Open": "Fenesta Open, AITA Men's/Women's",
        },
    },
    "Chess": {
        "min": 4,
        "max": 99,
        "trophies": {
            "Under-9": "National Schools Chess Championship",
            "Under-13": "National Sub-Junior",
            "Under-17": "National Junior",
            "Open": "National Premier, FIDE Ratings",
        },
    },
    "Swimming": {
        "min": 4,
        "max": 35,
        "trophies": {
            "Group IV (10-12)": "State Age Group",
            "Group III (13-14)": "Sub-Junior Nationals",
            "Group II (15-17)": "Junior Nationals",
            "Open": "Senior Nationals, National Games",
        },
    },
}

DEFAULT_CRITERIA: dict[str, Any] = {
    "min": 5,
    "max": 50,
    "trophies": {
        "Under-14": "Junior Level",
        "Under-19": "Senior Level",
        "Open": "Open Category",
    },
}

SPORTS_LIST = [
    "Archery",
    "Athletics",
    "Badminton",
    "Basketball",
    "Boxing",
    "Chess",
    "Cricket",
    "Cycling",
    "Football",
    "Golf",
    "Gymnastics",
    "Hockey",
    "Judo",
    "Kabaddi",
    "Karate",
    "Kho Kho",
    "Shooting",
    "Skating",
    "Squash",
    "Swimming",
    "Table Tennis",
    "Taekwondo",
    "Tennis",
    "Volleyball",
    "Weightlifting",
    "Wrestling",
    "Yoga",
]

CITY_DATA: dict[str, list[str]] = {
    "Andhra Pradesh": ["Visakhapatnam", "Vijayawada", "Guntur", "Nellore", "Kurnool", "Rajahmundry", "Tirupati", "Kakinada", "Anantapur", "Vizianagaram"],
    "Arunachal Pradesh": ["Itanagar", "Naharlagun", "Pasighat", "Tawang"],
    "Assam": ["Guwahati", "Silchar", "Dibrugarh", "Jorhat", "Nagaon", "Tinsukia", "Tezpur"],
    "Bihar": ["Patna", "Gaya", "Bhagalpur", "Muzaffarpur", "Purnia", "Darbhanga", "Bihar Sharif", "Arrah", "Begusarai", "Katihar"],
    "Chhattisgarh": ["Raipur", "Bhilai", "Bilaspur", "Korba", "Durg", "Rajnandgaon", "Raigarh", "Jagdalpur"],
    "Goa": ["Panaji", "Margao", "Vasco da Gama", "Mapusa", "Ponda"],
    "Gujarat": ["Ahmedabad", "Surat", "Vadodara", "Rajkot", "Bhavnagar", "Jamnagar", "Gandhinagar", "Junagadh", "Gandhidham", "Anand"],
    "Haryana": ["Faridabad", "Gurugram", "Panipat", "Ambala", "Yamunanagar", "Rohtak", "Hisar", "Karnal", "Sonipat", "Panchkula"],
    "Himachal Pradesh": ["Shimla", "Dharamshala", "Solan", "Mandi", "Baddi", "Nahan"],
    "Jharkhand": ["Jamshedpur", "Dhanbad", "Ranchi", "Bokaro Steel City", "Deoghar", "Phusro", "Hazaribagh"],
    "Karnataka": ["Bengaluru", "Mysuru", "Hubballi-Dharwad", "Mangaluru", "Belagavi", "Davangere", "Ballari", "Vijayapura", "Shivamogga", "Tumakuru"],
    "Kerala": ["Thiruvananthapuram", "Kochi", "Kozhikode", "Kollam", "Thrissur", "Kannur", "Alappuzha", "Palakkad"],
    "Madhya Pradesh": ["Indore", "Bhopal", "Jabalpur", "Gwalior", "Ujjain", "Sagar", "Dewas", "Satna", "Ratlam", "Rewa"],
    "Maharashtra": ["Mumbai", "Pune", "Nagpur", "Thane", "Nashik", "Aurangabad", "Solapur", "Amravati", "Navi Mumbai", "Kolhapur", "Akola", "Jalgaon"],
    "Manipur": ["Imphal"],
    "Meghalaya": ["Shillong", "Tura"],
    "Mizoram": ["Aizawl"],
    "Nagaland": ["Dimapur", "Kohima"],
    "Odisha": ["Bhubaneswar", "Cuttack", "Rourkela", "Berhampur", "Sambalpur", "Puri", "Balasore"],
    "Punjab": ["Ludhiana", "Amritsar", "Jalandhar", "Patiala", "Bathinda", "Mohali", "Pathankot", "Hoshiarpur"],
    "Rajasthan": ["Jaipur", "Jodhpur", "Kota", "Bikaner", "Ajmer", "Udaipur", "Bhilwara", "Alwar", "Bharatpur"],
    "Sikkim": ["Gangtok"],
    "Tamil Nadu": ["Chennai", "Coimbatore", "Madurai", "Tiruchirappalli", "Salem", "Tirunelveli", "Tiruppur", "Vellore", "Erode", "Thoothukudi"],
    "Telangana": ["Hyderabad", "Warangal", "Nizamabad", "Karimnagar", "Ramagundam", "Khammam"],
    "Tripura": ["Agartala"],
    "Uttar Pradesh": ["Lucknow", "Kanpur", "Ghaziabad", "Agra", "Meerut", "Varanasi", "Prayagraj", "Bareilly", "Noida", "Greater Noida", "Aligarh", "Moradabad", "Saharanpur", "Gorakhpur"],
    "Uttarakhand": ["Dehradun", "Haridwar", "Roorkee", "Haldwani", "Rudrapur", "Kashipur", "Rishikesh"],
    "West Bengal": ["Kolkata", "Asansol", "Siliguri", "Durgapur", "Bardhaman", "Malda", "Baharampur", "Habra", "Kharagpur"],
    "Delhi": ["New Delhi", "North Delhi", "South Delhi", "East Delhi", "West Delhi", "Dwarka", "Rohini"],
    "Chandigarh": ["Chandigarh"],
    "Puducherry": ["Puducherry"],
    "Jammu and Kashmir": ["Srinagar", "Jammu", "Anantnag"],
}

INDIAN_STATES = sorted(CITY_DATA.keys())


@dataclass
class Eligibility:
    status: str
    sport: str
    message: str
    min_age: int
    max_age: int
    category: str | None = None
    competitions: str | None = None
    brackets: list[str] = field(default_factory=list)

    @property
    def eligible(self) -> bool:
        return self.status == ELIGIBLE


def criteria_for(sport: str) -> dict[str, Any]:
    return SPORT_CRITERIA.get(sport, DEFAULT_CRITERIA)


def bracket_bound(label: str) -> int:
    """Upper age bound of a bracket label such as ``Under-14``.

    A range label like ``Group IV (10-12)`` is bounded by its last number.
    Labels without digits (``Open``) are unbounded.
    """
    numbers = re.findall(r"\d+", label)
    if not numbers:
        return UNBOUNDED_BRACKET
    return int(numbers[-1])


def sorted_brackets(trophies: dict[str, str]) -> list[str]:
    return sorted(trophies.keys(), key=bracket_bound)


def evaluate_eligibility(sport: str, age: int) -> Eligibility:
    criteria = criteria_for(sport)
    min_age = int(criteria["min"])
    max_age = int(criteria["max"])
    trophies: dict[str, str] = criteria["trophies"]
    brackets = sorted_brackets(trophies)

    if age < min_age:
        return Eligibility(
            status=TOO_YOUNG,
            sport=sport,
            min_age=min_age,
            max_age=max_age,
            brackets=brackets,
            message=(
                f"You are currently too young for professional {sport} academies. "
                f"Most academies start accepting students from age {min_age}."
            ),
        )
    if age > max_age:
        return Eligibility(
            status=TOO_OLD,
            sport=sport,
            min_age=min_age,
            max_age=max_age,
            brackets=brackets,
            message=(
                f"You might be above the typical age limit for professional academy intake for {sport} "
                f"(Max: {max_age}). However, you can look for recreational clubs."
            ),
        )

    category = OPEN_CATEGORY
    competitions = trophies.get(OPEN_CATEGORY, "Open Tournaments")
    for bracket in brackets:
        if age <= bracket_bound(bracket):
            category = bracket
            competitions = trophies[bracket]
            break

    return Eligibility(
        status=ELIGIBLE,
        sport=sport,
        min_age=min_age,
        max_age=max_age,
        brackets=brackets,
        category=category,
        competitions=competitions,
        message=f"You are eligible for {sport} training!",
    )


def sanitize_age_input(raw: Any) -> str:
    digits = re.sub(r"[^0-9]", "", str(raw or ""))
    return digits[:2]


def cities_for(state: str) -> list[str]:
    return sorted(CITY_DATA.get(state, []))


def academy_search_query(sport: str, city: str, state: str, category: str | None = None) -> str:
    category_part = f" for {category}" if category else ""
    return f"{sport} academy{category_part} in {city}, {state}"
