# SPDX-License-Identifier: Apache-2.0
#
import unittest

from txflow.fabric.transaction.tx_request import TransactionRequest, \
    create_tx_request, validate


class TransactionRequestTest(unittest.TestCase):

    def test_create(self):
        request = create_tx_request(['peer0.org1'], 'ngo', 'createNGO',
                                    ['{}'], 'mychannel', b'user1')

        self.assertEqual(request.targets, ('peer0.org1',))
        self.assertEqual(request.cc_name, 'ngo')
        self.assertEqual(request.fcn, 'createNGO')
        self.assertEqual(request.args, ('{}',))
        self.assertEqual(request.channel_name, 'mychannel')
        self.assertEqual(len(request.tx_id), 64)
        self.assertIn(request.tx_id, repr(request))

    def test_fresh_tx_id_per_request(self):
        first = create_tx_request(['p'], 'ngo', 'f', [], 'ch', b'user1')
        second = create_tx_request(['p'], 'ngo', 'f', [], 'ch', b'user1')
        self.assertNotEqual(first.tx_id, second.tx_id)

    def test_explicit_tx_id(self):
        request = create_tx_request(['p'], 'ngo', 'f', None, 'ch', b'u',
                                    tx_id='abc')
        self.assertEqual(request.tx_id, 'abc')
        self.assertEqual(request.args, ())

    def test_read_only(self):
        request = create_tx_request(['p'], 'ngo', 'f', [], 'ch', b'u')
        with self.assertRaises(AttributeError):
            request.tx_id = 'other'

    def test_validate(self):
        for targets, cc_name, fcn, channel in [([], 'ngo', 'f', 'ch'),
                                               (['p'], '', 'f', 'ch'),
                                               (['p'], 'ngo', None, 'ch'),
                                               (['p'], 'ngo', 'f', '')]:
            request = TransactionRequest(targets, cc_name, fcn, [], channel,
                                         'tx1')
            with self.assertRaises(ValueError):
                validate(request)

        with self.assertRaises(ValueError):
            validate(None)


if __name__ == '__main__':
    unittest.main()
