from __future__ import annotations

# Kecamatan (districts) of Kabupaten Jember.
KECAMATAN_JEMBER: tuple[str, ...] = (
    "Ajung",
    "Ambulu",
    "Arjasa",
    "Balung",
    "Bangsalsari",
    "Gumukmas",
    "Jelbuk",
    "Jenggawah",
    "Jombang",
    "Kalisat",
    "Kaliwates",
    "Kencong",
    "Ledokombo",
    "Mayang",
    "Mumbulsari",
    "Pakusari",
    "Panti",
    "Patrang",
    "Puger",
    "Rambipuji",
    "Semboro",
    "Silo",
    "Sukorambi",
    "Sukowono",
    "Sumberbaru",
    "Sumberjambe",
    "Sumbersari",
    "Tanggul",
    "Tempurejo",
    "Umbulsari",
    "Wuluhan",
)

FALLBACK_KECAMATAN = "Umum"
