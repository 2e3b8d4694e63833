"""
Pytest configuration and fixtures for the JMeter report dashboard tests.
"""

import pytest

from jmeter_dashboard.cache import pattern_cache
from jmeter_dashboard.report_assembly import ReportAssembly
from jmeter_dashboard.table_model import TableModel

SUMMARY = {"OkPercent": 74.55182072829132, "KoPercent": 25.448179271708682}

APDEX = {
    "supportsControllersDiscrimination": True,
    "overall": {"data": [0.4387053118303823, 500, 1500, "Total"], "isController": False},
    "titles": ["Apdex", "T (Toleration threshold)", "F (Frustration threshold)", "Label"],
    "items": [
        {"data": [0.0, 500, 1500, "API Flow Transaction"], "isController": True},
        {"data": [0.0, 500, 1500, "Send Coins"], "isController": False},
        {"data": [0.9803894297635605, 500, 1500, "Get Info"], "isController": False},
        {"data": [0.9072090330052114, 500, 1500, "Buy Item"], "isController": False},
        {"data": [0.30824175824175826, 500, 1500, "Login Request"], "isController": False},
    ],
}

STATISTICS = {
    "supportsControllersDiscrimination": True,
    "overall": {"data": ["Total", 14280, 3634, 25.448179271708682, 705.4309523809516, 0, 3757, 428.5,
                         1808.0, 2075.949999999999, 2521.380000000001, 236.46690622464357,
                         47.194866304293825, 82.719706429358], "isController": False},
    "titles": ["Label", "#Samples", "FAIL", "Error %", "Average", "Min", "Max", "Median", "90th pct",
               "95th pct", "99th pct", "Transactions/s", "Received", "Sent"],
    "items": [
        {"data": ["API Flow Transaction", 3454, 3454, 100.0, 2808.6887666473704, 153, 6000, 2922.0, 4091.0,
                  4338.75, 4890.049999999998, 57.310678967279486, 45.568611892919954, 80.09168746785193],
         "isController": True},
        {"data": ["Send Coins", 3591, 3591, 100.0, 977.424115845167, 0, 3580, 1024.0, 1734.8000000000002,
                  1917.3999999999996, 2176.6399999999994, 60.462688577586206, 11.802492470576844,
                  22.691167634108968], "isController": False},
        {"data": ["Get Info", 3595, 13, 0.3616133518776078, 118.75438108484023, 0, 1200, 64.0, 344.0,
                  451.1999999999998, 673.1999999999998, 60.92807267303912, 11.936889342247984,
                  19.415179346951057], "isController": False},
        {"data": ["Buy Item", 3454, 17, 0.4921829762594094, 294.5654313839031, 0, 2183, 201.0, 682.5, 889.25,
                  1262.2999999999975, 58.38700407390503, 8.163261532870159, 18.95112661012222],
         "isController": False},
        {"data": ["Login Request", 3640, 13, 0.35714285714285715, 1406.3936813186826, 113, 3757, 1439.0,
                  2266.8, 2445.95, 2808.670000000002, 60.275878057262084, 15.927385238826608,
                  22.86875895237543], "isController": False},
    ],
}

ERRORS = {
    "supportsControllersDiscrimination": False,
    "titles": ["Type of error", "Number of errors", "% in errors", "% in all samples"],
    "items": [
        {"data": ["400/Bad Request", 4, 0.1100715465052284, 0.028011204481792718], "isController": False},
        {"data": ["500/Internal Server Error", 3591, 98.8167308750688, 25.147058823529413], "isController": False},
        {"data": ["401/Unauthorized", 39, 1.0731975784259769, 0.27310924369747897], "isController": False},
    ],
}

TOP5_ERRORS = {
    "supportsControllersDiscrimination": False,
    "overall": {"data": ["Total", 14280, 3634, "500/Internal Server Error", 3591, "401/Unauthorized", 39,
                         "400/Bad Request", 4, "", "", "", ""], "isController": False},
    "titles": ["Sample", "#Samples", "#Errors", "Error", "#Errors", "Error", "#Errors", "Error", "#Errors",
               "Error", "#Errors", "Error", "#Errors"],
    "items": [
        {"data": [], "isController": False},
        {"data": ["Send Coins", 3591, 3591, "500/Internal Server Error", 3578, "401/Unauthorized", 13,
                  "", "", "", "", "", ""], "isController": False},
        {"data": ["Get Info", 3595, 13, "401/Unauthorized", 13, "", "", "", "", "", "", "", ""],
         "isController": False},
        {"data": ["Buy Item", 3454, 17, "401/Unauthorized", 13, "400/Bad Request", 4, "", "", "", "", "", ""],
         "isController": False},
        {"data": ["Login Request", 3640, 13, "500/Internal Server Error", 13, "", "", "", "", "", "", "", ""],
         "isController": False},
    ],
}

TABLES = {
    "apdexTable": APDEX,
    "statisticsTable": STATISTICS,
    "errorsTable": ERRORS,
    "top5ErrorsBySamplerTable": TOP5_ERRORS,
}


@pytest.fixture(autouse=True)
def clear_pattern_cache():
    """Start every test with an empty compiled filter cache."""
    pattern_cache.clear()
    yield
    pattern_cache.clear()


@pytest.fixture
def table_models():
    return {table_id: TableModel.from_dict(data) for table_id, data in TABLES.items()}


@pytest.fixture
def assembly(table_models):
    return ReportAssembly(table_models, dict(SUMMARY))


@pytest.fixture
def report_bundle():
    return {"summary": dict(SUMMARY), "tables": TABLES}
