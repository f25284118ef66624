#!/usr/bin/env python3
# SPDX-License-Identifier: MIT-0
# SPDX-FileCopyrightText:  2023 Istvan Pasztor
"""
Table driven generic CRC engine

Execute this script as a command to calculate CRCs or to self-test the
builtin CRC algorithms. Use this as a module to build a CrcEngine for any
8, 16 or 32 bit wide CRC and to create independent Hasher objects that
calculate that CRC incrementally:

    engine = CrcEngine(width=32, poly=0x04c11db7, init=0xffffffff,
                       xorout=0xffffffff, refin=True, refout=True)
    hasher = engine.new_hasher()
    hasher.update(b'1234')
    hasher.update(b'56789')
    assert hasher.get_value() == 0xcbf43926

Predefined CRC algorithms are available through the CRC_CATALOGUE list, the
CRC_PARAMS dict and the create_engine function. The parameters follow the
format of the CRC catalogue of the CRC RevEng project:
https://reveng.sourceforge.io/crc-catalogue/all.htm

An engine is immutable after construction and can be shared by any number of
threads. A hasher isn't thread-safe: use one hasher per calculation.
"""
import abc

SUPPORTED_WIDTHS = (8, 16, 32)
MAX_REFLECT_WIDTH = 63


class CrcError(Exception):
    pass


class InvalidParameterError(CrcError, ValueError):
    pass


class IndexOutOfRangeError(CrcError, IndexError):
    pass


def reverse_bits(value: int, width: int) -> int:
    """ Returns the lowest width bits of value in reversed order. The bits
    above width are ignored. """
    if not 0 <= width <= MAX_REFLECT_WIDTH:
        raise InvalidParameterError('invalid reflection width: %r' % width)
    value &= (1 << width) - 1
    return int('{v:0{w}b}'.format(v=value, w=width)[::-1], 2)


reversed_int8_bits = tuple(reverse_bits(i, 8) for i in range(256))


class Checksum(abc.ABC):
    """ The capabilities of an incremental checksum calculator. Code that
    consumes checksums should depend only on this interface. """

    @abc.abstractmethod
    def update(self, data, offset: int = 0, length: int = None) -> None:
        """ Consumes a single byte (if data is an int) or the
        data[offset:offset+length] range of a bytes-like object. """
        raise NotImplementedError

    @abc.abstractmethod
    def get_value(self, *, residue: bool = False) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def reset(self) -> None:
        raise NotImplementedError


class CrcEngine:
    """ Holds the parameters of a CRC algorithm along with the lookup table
    derived from them. Uses an unreflected (MSB-first) CRC register. The
    parameters are expected in the format used in the RevEng CRC catalogue.
    """

    __slots__ = ('width', 'poly', 'init', 'xorout', 'refin', 'refout',
                 'mask', 'msb_mask', 'table')

    def __init__(self, width: int, poly: int, init: int, xorout: int,
                 refin: bool, refout: bool):
        if (not isinstance(width, int) or isinstance(width, bool)
                or width not in SUPPORTED_WIDTHS):
            raise InvalidParameterError('unsupported CRC width: %r - supported'
                ' widths: %s' % (width, ', '.join(map(str, SUPPORTED_WIDTHS))))
        for name, v in (('poly', poly), ('init', init), ('xorout', xorout)):
            if not isinstance(v, int) or not 0 <= v < (1 << width):
                raise InvalidParameterError(
                    '%s=%r does not fit into %s bits' % (name, v, width))
        mask = (1 << width) - 1
        msb_mask = 1 << (width - 1)
        p = dict(width=width, poly=poly, init=init, xorout=xorout,
                 refin=bool(refin), refout=bool(refout), mask=mask,
                 msb_mask=msb_mask, table=self._make_table(width, poly, mask, msb_mask))
        for k, v in p.items():
            object.__setattr__(self, k, v)

    @staticmethod
    def _make_table(width, poly, mask, msb_mask):
        # Entry d is the remainder of byte d placed at the top of the register
        # after 8 steps of polynomial division.
        table = []
        for d in range(256):
            reg = (d << (width - 8)) & mask
            for _ in range(8):
                reg = (reg << 1) ^ poly if reg & msb_mask else reg << 1
            table.append(reg & mask)
        return tuple(table)

    def __setattr__(self, name, value):
        raise AttributeError('CrcEngine objects are immutable')

    def __delattr__(self, name):
        raise AttributeError('CrcEngine objects are immutable')

    def __repr__(self):
        return ('CrcEngine(width={!r}, poly=0x{:0{w}x}, init=0x{:0{w}x}, '
                'xorout=0x{:0{w}x}, refin={!r}, refout={!r})'.format(
                    self.width, self.poly, self.init, self.xorout, self.refin,
                    self.refout, w=(self.width+3)//4))

    def new_hasher(self, interim: int = None) -> 'Hasher':
        """ Returns a new, independent hasher that shares the lookup table of
        this engine. A calculation can be continued from the interim value of
        another hasher by passing it as the interim parameter. """
        return Hasher(self, interim)

    def checksum(self, data) -> int:
        h = Hasher(self)
        h.update(data)
        return h.get_value()

    def residue_const(self, dataword: bytes = b'') -> int:
        """ The residue constant is one way to check for errors. It is the
        register value (reflected if refout, without the xorout step) after
        processing an error-free codeword.

        A codeword is formed by calculating the CRC of the dataword and
        appending the CRC to that dataword in the correct bit and byte order.
        The dataword can be anything, it won't affect the result. """
        crc = self.checksum(dataword)
        if self.refin != self.refout:
            crc = reverse_bits(crc, self.width)
        endianness = 'little' if self.refin else 'big'
        codeword = bytes(dataword) + crc.to_bytes(self.width // 8, endianness)
        h = Hasher(self)
        h.update(codeword)
        return h.get_value(residue=True)


class Hasher(Checksum):
    """ Incremental calculator of the CRC defined by its engine. """

    __slots__ = ('_engine', '_start', '_current')

    def __init__(self, engine: CrcEngine, interim: int = None):
        if interim is None:
            interim = engine.init
        elif not isinstance(interim, int) or not 0 <= interim <= engine.mask:
            raise InvalidParameterError('interim=%r does not fit into %s bits'
                                        % (interim, engine.width))
        self._engine = engine
        self._start = interim
        self._current = interim

    @property
    def engine(self) -> CrcEngine:
        return self._engine

    @property
    def interim(self) -> int:
        """ The raw value of the CRC register. """
        return self._current

    def update(self, data, offset: int = 0, length: int = None) -> None:
        if isinstance(data, int):
            self._consume((data & 0xff,))
            return
        size = len(data)
        length = size - offset if length is None else length
        if offset < 0 or length < 0 or offset + length > size:
            raise IndexOutOfRangeError('offset=%r length=%r is out of range for'
                                       ' a buffer of %s bytes' % (offset, length, size))
        self._consume(data[offset:offset+length])

    def _consume(self, data):
        e = self._engine
        shift, mask, table, refin = e.width - 8, e.mask, e.table, e.refin
        crc = self._current
        for b in data:
            b = reversed_int8_bits[b] if refin else b
            temp = (crc ^ (b << shift)) & mask
            pos = (temp >> shift) & 0xff
            crc = (((temp << 8) & mask) ^ table[pos]) & mask
        self._current = crc

    def get_value(self, *, residue: bool = False) -> int:
        """ Returns the CRC of the data consumed so far. With residue=True the
        xorout step is skipped. """
        e = self._engine
        value = reverse_bits(self._current, e.width) if e.refout else self._current
        return value & e.mask if residue else (value ^ e.xorout) & e.mask

    def reset(self) -> None:
        self._current = self._start

    def copy(self) -> 'Hasher':
        h = Hasher(self._engine, self._start)
        h._current = self._current
        return h


_REVENG_CRC_CATALOGUE_FILE = '''
# The lines in this file follow the format used in the online CRC catalogue of
# the CRC RevEng tool: https://reveng.sourceforge.io/crc-catalogue/all.htm
# The `reveng` commandline tool can also output similar lines with its -D
# parameter. The optional "alias" parameters are based on the information
# provided in the online catalogue.
#
# Precise description of the CRC algorithm parameters:
# https://reveng.sourceforge.io/crc-catalogue/all.htm#crc.legend.params
#
# Only the 8, 16 and 32 bit wide algorithms of the catalogue are listed here
# because CrcEngine doesn't support other widths.

width=8 poly=0x2f init=0xff refin=false refout=false xorout=0xff check=0xdf residue=0x42 name="CRC-8/AUTOSAR"
width=8 poly=0xa7 init=0x00 refin=true refout=true xorout=0x00 check=0x26 residue=0x00 name="CRC-8/BLUETOOTH"
width=8 poly=0x9b init=0xff refin=false refout=false xorout=0x00 check=0xda residue=0x00 name="CRC-8/CDMA2000"
width=8 poly=0x39 init=0x00 refin=true refout=true xorout=0x00 check=0x15 residue=0x00 name="CRC-8/DARC"
width=8 poly=0xd5 init=0x00 refin=false refout=false xorout=0x00 check=0xbc residue=0x00 name="CRC-8/DVB-S2"
width=8 poly=0x1d init=0x00 refin=false refout=false xorout=0x00 check=0x37 residue=0x00 name="CRC-8/GSM-A"
width=8 poly=0x49 init=0x00 refin=false refout=false xorout=0xff check=0x94 residue=0x53 name="CRC-8/GSM-B"
width=8 poly=0x1d init=0xff refin=false refout=false xorout=0x00 check=0xb4 residue=0x00 name="CRC-8/HITAG"
width=8 poly=0x07 init=0x00 refin=false refout=false xorout=0x55 check=0xa1 residue=0xac name="CRC-8/I-432-1"
width=8 poly=0x1d init=0xfd refin=false refout=false xorout=0x00 check=0x7e residue=0x00 name="CRC-8/I-CODE"
width=8 poly=0x9b init=0x00 refin=false refout=false xorout=0x00 check=0xea residue=0x00 name="CRC-8/LTE"
width=8 poly=0x31 init=0x00 refin=true refout=true xorout=0x00 check=0xa1 residue=0x00 name="CRC-8/MAXIM-DOW" alias="CRC-8/MAXIM,DOW-CRC"
width=8 poly=0x1d init=0xc7 refin=false refout=false xorout=0x00 check=0x99 residue=0x00 name="CRC-8/MIFARE-MAD"
width=8 poly=0x31 init=0xff refin=false refout=false xorout=0x00 check=0xf7 residue=0x00 name="CRC-8/NRSC-5"
width=8 poly=0x2f init=0x00 refin=false refout=false xorout=0x00 check=0x3e residue=0x00 name="CRC-8/OPENSAFETY"
width=8 poly=0x07 init=0xff refin=true refout=true xorout=0x00 check=0xd0 residue=0x00 name="CRC-8/ROHC"
width=8 poly=0x1d init=0xff refin=false refout=false xorout=0xff check=0x4b residue=0xc4 name="CRC-8/SAE-J1850"
width=8 poly=0x07 init=0x00 refin=false refout=false xorout=0x00 check=0xf4 residue=0x00 name="CRC-8/SMBUS" alias="CRC-8"
width=8 poly=0x1d init=0xff refin=true refout=true xorout=0x00 check=0x97 residue=0x00 name="CRC-8/TECH-3250" alias="CRC-8/AES,CRC-8/EBU"
width=8 poly=0x9b init=0x00 refin=true refout=true xorout=0x00 check=0x25 residue=0x00 name="CRC-8/WCDMA"
width=16 poly=0x8005 init=0x0000 refin=true refout=true xorout=0x0000 check=0xbb3d residue=0x0000 name="CRC-16/ARC" alias="ARC,CRC-16,CRC-16/LHA,CRC-IBM"
width=16 poly=0xc867 init=0xffff refin=false refout=false xorout=0x0000 check=0x4c06 residue=0x0000 name="CRC-16/CDMA2000"
width=16 poly=0x8005 init=0xffff refin=false refout=false xorout=0x0000 check=0xaee7 residue=0x0000 name="CRC-16/CMS"
width=16 poly=0x8005 init=0x800d refin=false refout=false xorout=0x0000 check=0x9ecf residue=0x0000 name="CRC-16/DDS-110"
width=16 poly=0x0589 init=0x0000 refin=false refout=false xorout=0x0001 check=0x007e residue=0x0589 name="CRC-16/DECT-R" alias="R-CRC-16"
width=16 poly=0x0589 init=0x0000 refin=false refout=false xorout=0x0000 check=0x007f residue=0x0000 name="CRC-16/DECT-X" alias="X-CRC-16"
width=16 poly=0x3d65 init=0x0000 refin=true refout=true xorout=0xffff check=0xea82 residue=0x66c5 name="CRC-16/DNP"
width=16 poly=0x3d65 init=0x0000 refin=false refout=false xorout=0xffff check=0xc2b7 residue=0xa366 name="CRC-16/EN-13757"
width=16 poly=0x1021 init=0xffff refin=false refout=false xorout=0xffff check=0xd64e residue=0x1d0f name="CRC-16/GENIBUS" alias="CRC-16/DARC,CRC-16/EPC,CRC-16/EPC-C1G2,CRC-16/I-CODE"
width=16 poly=0x1021 init=0x0000 refin=false refout=false xorout=0xffff check=0xce3c residue=0x1d0f name="CRC-16/GSM"
width=16 poly=0x1021 init=0xffff refin=false refout=false xorout=0x0000 check=0x29b1 residue=0x0000 name="CRC-16/IBM-3740" alias="CRC-16/AUTOSAR,CRC-16/CCITT-FALSE"
width=16 poly=0x1021 init=0xffff refin=true refout=true xorout=0xffff check=0x906e residue=0xf0b8 name="CRC-16/IBM-SDLC" alias="CRC-16/ISO-HDLC,CRC-16/ISO-IEC-14443-3-B,CRC-16/X-25,CRC-B,X-25"
width=16 poly=0x1021 init=0xc6c6 refin=true refout=true xorout=0x0000 check=0xbf05 residue=0x0000 name="CRC-16/ISO-IEC-14443-3-A" alias="CRC-A"
width=16 poly=0x1021 init=0x0000 refin=true refout=true xorout=0x0000 check=0x2189 residue=0x0000 name="CRC-16/KERMIT" alias="CRC-16/BLUETOOTH,CRC-16/CCITT,CRC-16/CCITT-TRUE,CRC-16/V-41-LSB,CRC-CCITT,KERMIT"
width=16 poly=0x6f63 init=0x0000 refin=false refout=false xorout=0x0000 check=0xbdf4 residue=0x0000 name="CRC-16/LJ1200"
width=16 poly=0x5935 init=0xffff refin=false refout=false xorout=0x0000 check=0x772b residue=0x0000 name="CRC-16/M17"
width=16 poly=0x8005 init=0x0000 refin=true refout=true xorout=0xffff check=0x44c2 residue=0xb001 name="CRC-16/MAXIM-DOW" alias="CRC-16/MAXIM"
width=16 poly=0x1021 init=0xffff refin=true refout=true xorout=0x0000 check=0x6f91 residue=0x0000 name="CRC-16/MCRF4XX"
width=16 poly=0x8005 init=0xffff refin=true refout=true xorout=0x0000 check=0x4b37 residue=0x0000 name="CRC-16/MODBUS" alias="MODBUS"
width=16 poly=0x080b init=0xffff refin=true refout=true xorout=0x0000 check=0xa066 residue=0x0000 name="CRC-16/NRSC-5"
width=16 poly=0x5935 init=0x0000 refin=false refout=false xorout=0x0000 check=0x5d38 residue=0x0000 name="CRC-16/OPENSAFETY-A"
width=16 poly=0x755b init=0x0000 refin=false refout=false xorout=0x0000 check=0x20fe residue=0x0000 name="CRC-16/OPENSAFETY-B"
width=16 poly=0x1dcf init=0xffff refin=false refout=false xorout=0xffff check=0xa819 residue=0xe394 name="CRC-16/PROFIBUS" alias="CRC-16/IEC-61158-2"
width=16 poly=0x1021 init=0xb2aa refin=true refout=true xorout=0x0000 check=0x63d0 residue=0x0000 name="CRC-16/RIELLO"
width=16 poly=0x1021 init=0x1d0f refin=false refout=false xorout=0x0000 check=0xe5cc residue=0x0000 name="CRC-16/SPI-FUJITSU" alias="CRC-16/AUG-CCITT"
width=16 poly=0x8bb7 init=0x0000 refin=false refout=false xorout=0x0000 check=0xd0db residue=0x0000 name="CRC-16/T10-DIF"
width=16 poly=0xa097 init=0x0000 refin=false refout=false xorout=0x0000 check=0x0fb3 residue=0x0000 name="CRC-16/TELEDISK"
width=16 poly=0x1021 init=0x89ec refin=true refout=true xorout=0x0000 check=0x26b1 residue=0x0000 name="CRC-16/TMS37157"
width=16 poly=0x8005 init=0x0000 refin=false refout=false xorout=0x0000 check=0xfee8 residue=0x0000 name="CRC-16/UMTS" alias="CRC-16/BUYPASS,CRC-16/VERIFONE"
width=16 poly=0x8005 init=0xffff refin=true refout=true xorout=0xffff check=0xb4c8 residue=0xb001 name="CRC-16/USB"
width=16 poly=0x1021 init=0x0000 refin=false refout=false xorout=0x0000 check=0x31c3 residue=0x0000 name="CRC-16/XMODEM" alias="CRC-16/ACORN,CRC-16/LTE,CRC-16/V-41-MSB,XMODEM,ZMODEM"
width=32 poly=0x814141ab init=0x00000000 refin=false refout=false xorout=0x00000000 check=0x3010bf7f residue=0x00000000 name="CRC-32/AIXM" alias="CRC-32Q"
width=32 poly=0xf4acfb13 init=0xffffffff refin=true refout=true xorout=0xffffffff check=0x1697d06a residue=0x904cddbf name="CRC-32/AUTOSAR"
width=32 poly=0xa833982b init=0xffffffff refin=true refout=true xorout=0xffffffff check=0x87315576 residue=0x45270551 name="CRC-32/BASE91-D" alias="CRC-32D"
width=32 poly=0x04c11db7 init=0xffffffff refin=false refout=false xorout=0xffffffff check=0xfc891918 residue=0xc704dd7b name="CRC-32/BZIP2" alias="CRC-32/AAL5,CRC-32/DECT-B,B-CRC-32"
width=32 poly=0x8001801b init=0x00000000 refin=true refout=true xorout=0x00000000 check=0x6ec2edc4 residue=0x00000000 name="CRC-32/CD-ROM-EDC"
width=32 poly=0x04c11db7 init=0x00000000 refin=false refout=false xorout=0xffffffff check=0x765e7680 residue=0xc704dd7b name="CRC-32/CKSUM" alias="CKSUM,CRC-32/POSIX"
width=32 poly=0x1edc6f41 init=0xffffffff refin=true refout=true xorout=0xffffffff check=0xe3069283 residue=0xb798b438 name="CRC-32/ISCSI" alias="CRC-32/BASE91-C,CRC-32/CASTAGNOLI,CRC-32/INTERLAKEN,CRC-32C"
width=32 poly=0x04c11db7 init=0xffffffff refin=true refout=true xorout=0xffffffff check=0xcbf43926 residue=0xdebb20e3 name="CRC-32/ISO-HDLC" alias="CRC-32,CRC-32/ADCCP,CRC-32/V-42,CRC-32/XZ,PKZIP"
width=32 poly=0x04c11db7 init=0xffffffff refin=true refout=true xorout=0x00000000 check=0x340bc6d9 residue=0x00000000 name="CRC-32/JAMCRC" alias="JAMCRC"
width=32 poly=0x741b8cd7 init=0xffffffff refin=true refout=true xorout=0x00000000 check=0xd2c22f51 residue=0x00000000 name="CRC-32/MEF"
width=32 poly=0x04c11db7 init=0xffffffff refin=false refout=false xorout=0x00000000 check=0x0376e6e7 residue=0x00000000 name="CRC-32/MPEG-2"
width=32 poly=0x000000af init=0x00000000 refin=false refout=false xorout=0x00000000 check=0xbd0be338 residue=0x00000000 name="CRC-32/XFER"
'''


def parse_crc_params(line: str) -> dict[str, object]:
    """ Parses a line of the RevEng CRC catalogue format, for example:
    width=16 poly=0x1021 init=0xffff refin=false refout=false xorout=0x0000 """
    try:
        m = {kv[0]: kv[1] for kv in (field.split('=', 1) for field in line.split())}
    except IndexError:
        raise InvalidParameterError('fields must have the key=value format') from None
    if 'width' not in m or 'poly' not in m:
        raise InvalidParameterError('the required "width" or "poly" field is missing')
    invalid = set(m.keys()) - {'width', 'poly', 'init', 'refin', 'refout',
                               'xorout', 'check', 'residue', 'name', 'alias'}
    if invalid:
        raise InvalidParameterError('invalid parameters: ' + ', '.join(sorted(invalid)))
    def unquote(s):
        return s[1:-1] if s.startswith('"') and s.endswith('"') else s
    def to_bool(s):
        if s.lower() not in ('true', 'false'):
            raise InvalidParameterError('invalid bool value: %r' % s)
        return s.lower() == 'true'
    def to_int(key, default='0'):
        try:
            return int(m.get(key, default), 0)
        except ValueError:
            raise InvalidParameterError('invalid %s value: %r' % (key, m[key])) from None
    return {
        'width': to_int('width'),
        'poly': to_int('poly'),
        'init': to_int('init'),
        'refin': to_bool(m.get('refin', 'false')),
        'refout': to_bool(m.get('refout', 'false')),
        'xorout': to_int('xorout'),
        'check': to_int('check'),
        'residue': to_int('residue'),
        'name': unquote(m.get('name', 'CUSTOM')),
        'alias': [s for s in unquote(m.get('alias', '')).split(',') if s],
    }


def _parse_crc_catalogue(crc_catalogue_file_contents) -> list[dict[str, object]]:
    lines = (x.strip() for x in crc_catalogue_file_contents.splitlines())
    return [parse_crc_params(x) for x in lines if x and not x.startswith('#')]


CRC_CATALOGUE = _parse_crc_catalogue(_REVENG_CRC_CATALOGUE_FILE)
CRC_PARAMS = {m['name'].upper(): m for m in CRC_CATALOGUE}
for _m in CRC_CATALOGUE:
    for _alias in _m.get('alias', ()):
        CRC_PARAMS[_alias.upper()] = _m


def engine_from_params(p: dict[str, object]) -> CrcEngine:
    return CrcEngine(p['width'], p['poly'], p['init'], p['xorout'],
                     p['refin'], p['refout'])


def create_engine(name: str):
    """ Returns the CrcEngine of a builtin CRC algorithm or None if the name
    or alias (case-insensitive) is unknown. """
    p = CRC_PARAMS.get(name.upper())
    if not p:
        return None
    return engine_from_params(p)


def _test_crc(name, width, poly, init, xorout, refin, refout, check, residue, alias=()):
    engine = CrcEngine(width, poly, init, xorout, refin, refout)
    print('{:25s} {!r}'.format(name, engine))

    crc_1 = engine.checksum(b'123456789')

    # Calculating the same CRC by feeding in the data in smaller chunks
    # including zero-sized chunks and a continuation from an interim value.
    h = engine.new_hasher()
    h.update(b'')
    h.update(b'1')
    h.update(b'234')
    h = engine.new_hasher(h.interim)
    h.update(b'')
    h.update(b'0567', 1, 2)
    for b in b'789':
        h.update(b)
    crc_2 = h.get_value()

    residue_1 = engine.residue_const(b'hope it works...')
    residue_2 = engine.residue_const()

    print('{:25s} expected:    check={:0{w}x} residue={:0{w}x}\n'
          '{:25s} test_output: check={:0{w}x} residue={:0{w}x}'.format
          ('', check, residue, '', crc_1, residue_1, w=(width+3)//4))
    if alias:
        print('{:25s} aliases:     {}'.format('', ', '.join(alias)))

    if crc_1 != crc_2:
        print('Chunked CRC calculation failed.')
        return False
    if crc_1 != check:
        print('CRC doesn\'t match the reference "check" value.')
        return False

    if residue_1 != residue_2:
        print('The residue calculations returned conflicting results.')
        return False
    if residue_1 != residue:
        print('The residue value does not match the reference constant.')
        return False

    return True


def _test_and_list_catalogue_entries(crc_catalogue):
    passed, failed = [], []
    for entry in crc_catalogue:
        if _test_crc(**entry):
            passed.append(entry['name'])
        else:
            failed.append(entry['name'])
    if failed:
        print('Failed CRCs: ' + ', '.join(failed))
    print('Number of failed CRC algorithms: %s' % len(failed))
    print('Number of CRC algorithms that passed the test: %s' % len(passed))
    return not failed


def _input_iterator_hex(infile, max_chunk_size=16*1024):
    import re
    p_space = re.compile(rb'\s+')
    p_hex = re.compile(rb'^[0-9a-fA-F]*$')

    # A byte may be split between two chunks so an odd nibble is kept in
    # leftover until the next chunk arrives.
    leftover = b''
    while 1:
        chunk = infile.read(max_chunk_size)
        if not chunk:
            break
        chunk = p_space.sub(b'', chunk)
        if not p_hex.match(chunk):
            raise InvalidParameterError('invalid input character - '
                                        'allowed characters: hex digits, whitespace')
        chunk = leftover + chunk
        leftover = chunk[len(chunk) & ~1:]
        chunk = chunk[:len(chunk) & ~1]
        if chunk:
            yield bytes.fromhex(chunk.decode('ascii'))
    if leftover:
        raise InvalidParameterError('unconsumed nibble at the end of input stream: '
                                    + leftover.decode('ascii'))


def _input_iterator(infile, input_format):
    if input_format == 'hex':
        yield from _input_iterator_hex(infile)
        return

    assert input_format == 'binary'
    MAX_CHUNK_SIZE = 128 * 1024
    while 1:
        chunk = infile.read(MAX_CHUNK_SIZE)
        if not chunk:
            break
        yield chunk


def _calc_crc(args, open_input):
    name_or_params = args.crc.strip()
    custom_prefix = 'custom:'
    if name_or_params.lower().startswith(custom_prefix):
        try:
            p = parse_crc_params(name_or_params[len(custom_prefix):].strip())
        except InvalidParameterError as ex:
            raise InvalidParameterError('invalid "CUSTOM:" CRC parameters: %s' % ex) from ex
        name_or_params = 'CUSTOM'
    else:
        p = CRC_PARAMS.get(name_or_params.upper())
        if p is None:
            raise InvalidParameterError('invalid CRC algorithm name: %r' % name_or_params)

    engine = engine_from_params(p)
    w = (engine.width+3)//4

    if not args.quiet:
        print('{} {!r}'.format(name_or_params, engine))

    if args.format == '0xhex':
        fmt_str = '0x{:0{w}x}'
    elif args.format == 'hex':
        fmt_str = '{:0{w}x}'
    else:
        fmt_str = '{!r}'

    if args.residue_const:
        v = engine.residue_const()
        fmt_str = fmt_str if args.quiet else 'residue constant: ' + fmt_str
        print(fmt_str.format(v, w=w))
        return

    hasher = engine.new_hasher(args.continue_from)
    bytes_processed = 0
    max_input_bytes = args.max_input_bytes
    if max_input_bytes is None or max_input_bytes > 0:
        for chunk in _input_iterator(open_input(), args.input_format):
            if max_input_bytes is not None:
                if max_input_bytes <= 0:
                    break
                chunk = chunk[:max_input_bytes]
                max_input_bytes -= len(chunk)
            hasher.update(chunk)
            bytes_processed += len(chunk)
    if args.interim_remainder:
        v = hasher.interim
    else:
        v = hasher.get_value(residue=args.residue)
    if not args.quiet:
        print('number of bytes processed: %s' % bytes_processed)
        if args.interim_remainder:
            fmt_str = 'interim remainder: ' + fmt_str
        elif args.residue:
            fmt_str = 'residue: ' + fmt_str
        else:
            fmt_str = 'crc: ' + fmt_str
    print(fmt_str.format(v, w=w))


def _main(argv=None):
    import argparse
    import sys
    p = argparse.ArgumentParser(description='Generic table driven CRC calculator.')
    auto_int = lambda s: int(s, 0)
    p.add_argument('-l', '--list', action='store_true', help=
                   'list and test all builtin CRC algorithms')
    p.add_argument('--residue-const', action='store_true', help=
                   'calculate the residue constant for the specified CRC '
                   'algorithm (this requires no input data)')
    p.add_argument('--residue', action='store_true', help=
                   'output the residue instead of the final CRC '
                   '(skip the xorout step)')
    p.add_argument('-c', '--crc', help='the name of the CRC algorithm or'
                   ' "CUSTOM: width=X poly=Y ..."')
    p.add_argument('-r', '--interim-remainder', action='store_true', help=
                   'output an interim remainder instead of the final CRC')
    p.add_argument('-k', '--continue-from', type=auto_int, help='continue CRC '
                   'calculation from the specified interim remainder')
    p.add_argument('-i', '--input-format', choices=['binary', 'hex'],
                   default='binary', help='input data format')
    p.add_argument('-m', '--max-input-bytes', type=auto_int, help=
                   'maximum number of bytes to process from the input')
    p.add_argument('-f', '--format', choices=['0xhex', 'hex', 'decimal'],
                   default='0xhex', help='output format of the crc, residue, '
                   'residue constant or interim remainder')
    p.add_argument('-q', '--quiet', action='store_true', help=
                   'output only the result of the calculation')
    p.add_argument('infile', nargs='?', help=
                   'name of the input file, default: stdin')
    args = p.parse_args(argv)

    if sum((args.interim_remainder, args.residue_const, args.residue)) > 1:
        print('You can use at most one of the following parameters: '
              '--interim-remainder, --residue-const, --residue', file=sys.stderr)
        sys.exit(1)

    if args.list:
        sys.exit(0 if _test_and_list_catalogue_entries(CRC_CATALOGUE) else 1)

    if args.crc:
        opened = []
        def open_input():
            if not args.infile:
                return sys.stdin.buffer  # we want to read binary data not strings
            opened.append(open(args.infile, 'rb'))
            return opened[-1]
        try:
            _calc_crc(args, open_input)
        except CrcError as ex:
            print('error: %s' % ex, file=sys.stderr)
            sys.exit(1)
        finally:
            for f in opened:
                f.close()
        sys.exit(0)

    p.print_help()
    sys.exit(2)


if __name__ == '__main__':
    _main()


"""
The example below shows how to use --residue-const and --residue parameters.
A codeword is a dataword (a piece of data) with its CRC appended in the correct
bit and byte order. Feeding the whole codeword (including the appended CRC value)
into the CRC calculator should leave the residue constant in the CRC register if
the codeword isn't corrupted.

The CRC catalogue of the RevEng project mentions codeword examples when the
documentation of a CRC algorithm provides some:
https://reveng.sourceforge.io/crc-catalogue/all.htm
We will test a codeword provided for the CRC-32/CASTAGNOLI algorithm:
000102030405060708090A0B0C0D0E0F101112131415161718191A1B1C1D1E1F4E79DD46

# 1. Getting the residue constant of the CRC algorithm:

$ python3 generic_crc.py -qc CRC-32/CASTAGNOLI --residue-const
0xb798b438

# 2. Feeding the codeword into generic_crc.py and asking for the residue left
#    in the CRC register:

$ echo '000102030405060708090A0B0C0D0E0F101112131415161718191A1B1C1D1E1F4E79DD46' \\
       | python3 generic_crc.py -qc CRC-32/CASTAGNOLI -i hex --residue
0xb798b438
"""
