"""Enumerations shared by the models (stored by value)."""
import enum


def enum_values(enum_cls):
    """Persist enum values, not member names (values are the stored contract)."""
    return [member.value for member in enum_cls]


class ShirtType(str, enum.Enum):
    """T-shirt product lines."""
    KAOS_DEWASA = 'Kaos Dewasa'
    KAOS_DEWASA_PANJANG = 'Kaos Dewasa Panjang'
    KAOS_BLOOMBEE = 'Kaos Bloombee'
    KAOS_ANAK = 'Kaos Anak'
    KAOS_ANAK_TANGGUNG = 'Kaos Anak Tanggung'


class ShirtSize(str, enum.Enum):
    """T-shirt sizes."""
    M = 'M'
    L = 'L'
    XL = 'XL'
    XL2 = '2XL'
    XL3 = '3XL'
    XL4 = '4XL'
    XL5 = '5XL'
    XL6 = '6XL'
    XL7 = '7XL'
    XL8 = '8XL'


class ConsignmentStatus(str, enum.Enum):
    """Consignment lifecycle status."""
    AKTIF = 'aktif'         # Goods out, nothing paid
    SEBAGIAN = 'sebagian'   # Partially paid
    LUNAS = 'lunas'         # Fully paid
    RETURN = 'return'       # Every item returned

    @property
    def is_terminal(self):
        return self in (ConsignmentStatus.LUNAS, ConsignmentStatus.RETURN)


class ActivityType(str, enum.Enum):
    """Activity log categories."""
    STOK = 'stok'
    KONSINYASI = 'konsinyasi'
    PENJUALAN = 'penjualan'
    RETURN = 'return'
    HAPUS = 'hapus'
